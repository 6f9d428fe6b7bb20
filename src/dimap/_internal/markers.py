from typing import TYPE_CHECKING, Annotated, Any, TypeVar, Union, get_args, get_origin

T = TypeVar("T")
_ANNOTATED_MARKER_MIN_ARGS = 2


class InjectedMarker:
    """A marker used to indicate a field or parameter is populated by the container.

    Struct fields without it are never touched by ``Container.apply``.
    """

    def __repr__(self) -> str:
        return "InjectedMarker()"


if TYPE_CHECKING:
    Injected = Union[T, T]  # noqa: UP007,PYI016
    """Mark a field or parameter for container-driven injection.

    At runtime ``Injected[T]`` becomes ``Annotated[T, InjectedMarker()]``.

    Examples:
        .. code-block:: python

            @dataclass
            class Handler:
                greeter: Injected[Greeter]
                name: str = "handler"


            container.apply(handler)
    """

else:

    class Injected:
        """Mark a field or parameter for container-driven injection.

        At runtime ``Injected[T]`` resolves to ``Annotated[T, InjectedMarker()]``.
        Other ``Annotated`` metadata on ``T`` is preserved and stays part of the
        binding key.

        Examples:
            .. code-block:: python

                @dataclass
                class Handler:
                    greeter: Injected[Greeter]
                    name: str = "handler"


                container.apply(handler)

        """

        def __class_getitem__(cls, item: T) -> Annotated[T, InjectedMarker]:
            if get_origin(item) is Annotated:
                args = get_args(item)
                inner = args[0]
                metadata = args[1:]
                return build_annotated_key((inner, *metadata, InjectedMarker()))
            return build_annotated_key((item, InjectedMarker()))


def is_injected_annotation(annotation: Any) -> bool:
    """Return True when annotation is Annotated[..., InjectedMarker()]."""
    if get_origin(annotation) is not Annotated:
        return False
    annotation_args = get_args(annotation)
    if len(annotation_args) < _ANNOTATED_MARKER_MIN_ARGS:
        return False
    metadata = annotation_args[1:]
    return any(isinstance(item, InjectedMarker) for item in metadata)


def strip_injected_annotation(annotation: Any) -> Any:
    """Strip Injected marker while preserving other Annotated metadata."""
    if not is_injected_annotation(annotation):
        return annotation

    annotation_args = get_args(annotation)
    parameter_type = annotation_args[0]
    metadata = annotation_args[1:]
    filtered_metadata = tuple(item for item in metadata if not isinstance(item, InjectedMarker))
    if not filtered_metadata:
        return parameter_type
    return build_annotated_key((parameter_type, *filtered_metadata))


def build_annotated_key(params: tuple[object, ...]) -> Any:
    """Return Annotated[...] with a pre-built params tuple (Py 3.10+ compatible)."""
    try:
        return Annotated.__class_getitem__(params)  # type: ignore[attr-defined]
    except AttributeError:
        return Annotated.__getitem__(params)  # type: ignore[attr-defined]

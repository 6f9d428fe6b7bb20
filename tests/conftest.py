"""Shared pytest fixtures for dimap tests."""

import pytest

from dimap import Container

pytest_plugins = ["pytester"]


@pytest.fixture()
def container() -> Container:
    """Empty container without a parent."""
    return Container()


@pytest.fixture()
def parent_container() -> Container:
    """Empty container used as the fallback of ``child_container``."""
    return Container()


@pytest.fixture()
def child_container(parent_container: Container) -> Container:
    """Empty container whose parent is ``parent_container``."""
    return Container(parent=parent_container)

import pytest

from pagecraft.core.navigation import Navigation, NavigationDirectory, NavigationItem
from pagecraft.core.services.path_mutator import PathMutator
from pagecraft.core.services.structure_editing_service import StructureEditingService


@pytest.fixture
def service(registry, id_factory):
    return StructureEditingService(registry, id_factory)


@pytest.fixture
def navigation():
    return NavigationDirectory(
        [
            Navigation(
                id="nav-main",
                name="Main",
                items=[
                    NavigationItem("Home", "/"),
                    NavigationItem("Blog", "https://blog.example.com", "external"),
                ],
            )
        ]
    )


@pytest.fixture
def mutator(registry, navigation):
    return PathMutator(registry, navigation)

"""Test suite for the projector registry."""

import threading

import pytest

from modis_reader.core.registry import ProjectorRegistry, projector_registry
from modis_reader.exceptions import UnknownProjectorError
from modis_reader.raster.projection import MercatorProjector


class TestProjectorRegistry:
    """Test the ProjectorRegistry class."""

    def setup_method(self):
        """Setup for each test."""
        self.registry = ProjectorRegistry("test")

    def test_decorator_registration(self):
        """Test registration via decorator."""
        @self.registry.register("identity", description="No-op projector")
        class IdentityProjector:
            pass

        assert "identity" in self.registry
        assert self.registry.get("identity") is IdentityProjector
        assert self.registry.get_metadata("identity").description == "No-op projector"

    def test_lookup_is_case_insensitive(self):
        @self.registry.register("Identity")
        class IdentityProjector:
            pass

        assert "IDENTITY" in self.registry
        assert self.registry.get("identity") is IdentityProjector
        assert self.registry.list_registered() == ["identity"]

    def test_description_defaults_to_docstring(self):
        @self.registry.register("identity")
        class IdentityProjector:
            """Leaves shapes untouched.

            Longer text.
            """

        assert self.registry.get_metadata("identity").description == "Leaves shapes untouched."

    def test_duplicate_registration_error(self):
        """Test that registering a second class under a taken name fails."""
        @self.registry.register("identity")
        class First:
            pass

        with pytest.raises(ValueError) as exc_info:
            @self.registry.register("identity")
            class Second:
                pass

        assert "already registered" in str(exc_info.value)
        assert self.registry.get("identity") is First

    def test_force_registration(self):
        @self.registry.register("identity")
        class First:
            pass

        @self.registry.register("identity", force=True)
        class Second:
            pass

        assert self.registry.get("identity") is Second

    def test_unknown_identifier(self):
        """Test that a missing identifier lists what is available."""
        @self.registry.register("identity")
        class IdentityProjector:
            pass

        with pytest.raises(UnknownProjectorError) as exc_info:
            self.registry.get("lambert")

        assert "Available: ['identity']" in str(exc_info.value)

    def test_create(self):
        @self.registry.register("identity")
        class IdentityProjector:
            pass

        assert isinstance(self.registry.create("identity"), IdentityProjector)
        assert self.registry.create(None) is None
        assert self.registry.create("") is None

    def test_unregister(self):
        @self.registry.register("identity")
        class IdentityProjector:
            pass

        self.registry.unregister("identity")
        assert "identity" not in self.registry

    def test_concurrent_registration(self):
        """Test thread-safe registration from several threads."""
        def register(index):
            self.registry.register(f"projector_{index}")(type(f"P{index}", (), {}))

        threads = [threading.Thread(target=register, args=(i,)) for i in range(20)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(self.registry.list_registered()) == 20


class TestBuiltinProjectors:
    """Test the projectors registered on import."""

    def test_mercator_is_registered(self):
        assert "mercator" in projector_registry
        assert projector_registry.get("mercator") is MercatorProjector

    def test_create_mercator(self):
        assert isinstance(projector_registry.create("Mercator"), MercatorProjector)

"""
Test the namespace behavior of the rhosocial package
src/rhosocial has no __init__.py, so the fixtures package must be importable
as a portion of the shared ``rhosocial`` namespace.
"""

import sys
from pathlib import Path

# Add src and tests to Python path to allow imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent))


def test_can_import_fixtures_package():
    """Test that the fixtures package imports from the namespace"""
    import rhosocial.activerecord_fixtures
    assert rhosocial.activerecord_fixtures is not None
    assert rhosocial.activerecord_fixtures.__file__.endswith('__init__.py')


def test_rhosocial_is_a_namespace_package():
    """The shared rhosocial package carries no __init__.py of its own"""
    import rhosocial
    assert getattr(rhosocial, '__file__', None) is None
    assert any(Path(p).name == 'rhosocial' for p in rhosocial.__path__)


def test_can_access_public_classes():
    """Test that the public classes are exported at package level"""
    from rhosocial.activerecord_fixtures import FixtureLoader, HasAndBelongsToMany, ModelAdapter, MySQLBackend

    for cls in (FixtureLoader, HasAndBelongsToMany, ModelAdapter, MySQLBackend):
        assert isinstance(cls, type)


def test_version_attribute():
    """Test that the version attribute is a non-empty string"""
    import rhosocial.activerecord_fixtures

    version = rhosocial.activerecord_fixtures.__version__
    assert isinstance(version, str)
    assert len(version) > 0


def test_all_names_exist():
    import rhosocial.activerecord_fixtures as package

    missing = [name for name in package.__all__ if not hasattr(package, name)]
    assert missing == []


if __name__ == "__main__":
    # Run the tests directly if executed as a script
    test_can_import_fixtures_package()
    test_rhosocial_is_a_namespace_package()
    test_can_access_public_classes()
    test_version_attribute()
    test_all_names_exist()
    print("All namespace behavior tests passed!")

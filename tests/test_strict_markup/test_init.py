"""Test module for strict_markup package initialization."""


def test_package_import() -> None:
    """Test that the package can be imported successfully."""
    # Arrange & Act
    import strict_markup

    # Assert
    assert strict_markup is not None


def test_package_has_version() -> None:
    """Test that the package has a version attribute."""
    # Arrange & Act
    import strict_markup

    # Assert
    assert isinstance(strict_markup.__version__, str)
    assert strict_markup.__version__ == "0.1.0"


def test_package_has_author() -> None:
    """Test that the package has an author attribute."""
    # Arrange & Act
    import strict_markup

    # Assert
    assert strict_markup.__author__ == "Strict Markup Team"


def test_package_all_exports() -> None:
    """Test that __all__ contains expected exports."""
    # Arrange & Act
    import strict_markup

    # Assert
    for name in ("parse", "render", "unwrap", "bind", "MarkupParser",
                 "Element", "Opaque", "new_element", "ParseError",
                 "RenderTypeError", "DEFAULT_VOID_ELEMENTS"):
        assert name in strict_markup.__all__
        assert hasattr(strict_markup, name)


def test_default_constants() -> None:
    """Test that the default void elements and entities are exposed."""
    import strict_markup

    assert strict_markup.DEFAULT_VOID_ELEMENTS == frozenset({"br", "meta"})
    assert strict_markup.DEFAULT_ENTITIES["amp"] == "&"
    assert strict_markup.DEFAULT_ENTITIES["#39"] == "'"

from vizengine.errors import ConfigurationError, EngineError, InvalidDataError, UnknownCategoryError


def test_hierarchy_matches_builtin_expectations():
    assert issubclass(ConfigurationError, ValueError)
    assert issubclass(InvalidDataError, ValueError)
    assert issubclass(UnknownCategoryError, KeyError)
    assert issubclass(UnknownCategoryError, ConfigurationError)
    assert issubclass(InvalidDataError, EngineError)


def test_context_defaults_to_empty_dict():
    assert EngineError("x").context == {}
    assert InvalidDataError("x", context={"row": 2}).context == {"row": 2}


def test_unknown_category_message_is_not_repr_quoted():
    err = UnknownCategoryError("Unknown category: 'z'")
    assert str(err) == "Unknown category: 'z'"

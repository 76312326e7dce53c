"""Tests for row decoding."""

from types import SimpleNamespace

import pytest

from sqlcraft.io.connectors import ConfigurationError, FetchMode, FetchStyle

COLUMNS = ["id", "name", "id"]
VALUES = (1, "ada", 2)


@pytest.mark.unit
class TestFetchStyle:
    def test_map_keeps_last_duplicate(self):
        assert FetchStyle().decode(COLUMNS, VALUES) == {"id": 2, "name": "ada"}

    def test_debug_map_collects_duplicates(self):
        style = FetchStyle(mode=FetchMode.AS_DEBUG_MAP)

        assert style.decode(COLUMNS, VALUES) == {"id": [1, 2], "name": "ada"}

    def test_set_keeps_every_value(self):
        style = FetchStyle(mode=FetchMode.AS_SET)

        assert style.decode(COLUMNS, VALUES) == (1, "ada", 2)

    def test_object(self):
        row = FetchStyle(mode=FetchMode.AS_OBJECT).decode(["a"], [1])

        assert row == SimpleNamespace(a=1)

    def test_class_from_dotted_path(self):
        style = FetchStyle(mode=FetchMode.AS_CLASS, class_="types.SimpleNamespace")

        assert style.decode(["a"], [1]) == SimpleNamespace(a=1)

    def test_each_row_gets_a_new_instance(self):
        style = FetchStyle(mode=FetchMode.AS_CLASS, class_=SimpleNamespace)

        assert style.decode(["a"], [1]) is not style.decode(["a"], [1])

    @pytest.mark.parametrize(
        "class_",
        [None, "NoModule", "sqlcraft.missing.Thing", "types.NoSuchClass", "os.sep"],
    )
    def test_bad_class(self, class_):
        style = FetchStyle(mode=FetchMode.AS_CLASS, class_=class_)

        with pytest.raises(ConfigurationError):
            style.decode(["a"], [1])

    def test_reusable_object_requires_target(self):
        with pytest.raises(ConfigurationError, match="target"):
            FetchStyle(mode=FetchMode.AS_REUSABLE_OBJECT).decode(["a"], [1])

    def test_reusable_object_is_overwritten(self):
        target = SimpleNamespace(a=0, b="kept")
        style = FetchStyle(mode=FetchMode.AS_REUSABLE_OBJECT, target=target)

        assert style.decode(["a"], [5]) is target
        assert (target.a, target.b) == (5, "kept")

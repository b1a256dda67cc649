from tracelog.tracer.utils import format_inputs, format_output


def test_positional_and_defaults_not_passed():
    def f(a, b, c=3):
        return None

    assert format_inputs(f, (1,), {"b": 2}) == {"a": 1, "b": 2}


def test_keyword_only_and_var_kwargs():
    def f(a, *, key, **rest):
        return None

    assert format_inputs(f, (1,), {"key": "k", "other": 2}) == {
        "a": 1,
        "key": "k",
        "rest": {"other": 2},
    }


def test_cls_is_dropped():
    class Model:
        @classmethod
        def build(cls, size):
            return None

    assert format_inputs(Model.build.__func__, (Model, 3), {}) == {"size": 3}


def test_builtin_without_signature():
    result = format_inputs(dict.fromkeys, ("ab",), {})

    assert result in ({"iterable": "ab"}, {"args": ["ab"], "kwargs": {}})


def test_format_output():
    assert format_output({"a": 1}) == {"a": 1}
    assert format_output([1, 2]) == {"output": [1, 2]}
    assert format_output(None) == {"output": None}

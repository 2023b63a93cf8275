from tensorgraph.errors import TensorGraphError, vec_to_string


def test_vec_to_string_empty():
    assert vec_to_string([]) == "[]"


def test_vec_to_string_ints():
    assert vec_to_string([1, 2, 3]) == "[1,2,3]"


def test_vec_to_string_accepts_generators():
    assert vec_to_string(x for x in (4, 5)) == vec_to_string([4, 5])


def test_vec_to_string_single_element_has_no_comma():
    text = vec_to_string([42])
    assert "," not in text
    assert text.startswith("[") and text.endswith("]")


def test_error_carries_message():
    error = TensorGraphError("Kernel already registered")
    assert isinstance(error, RuntimeError)
    assert str(error) == "Kernel already registered"
    assert error.info == "Kernel already registered"
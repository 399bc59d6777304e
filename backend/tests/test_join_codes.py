from scavhunt.services.join_codes import ALPHABET, generate_code, normalize_code


def test_generated_codes_avoid_look_alikes():
    for _ in range(50):
        code = generate_code(8)
        assert len(code) == 8
        assert set(code) <= set(ALPHABET)
        assert not set(code) & set("0O1IL")


def test_normalize_code():
    assert normalize_code(" abc-dfg ") == "ABCDFG"
    assert normalize_code("") == ""
    assert normalize_code(None) == ""

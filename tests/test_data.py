import pytest

from data import BracketSpan, CorpusAlignmentError, ParsedSentence, Terminal, read_line_pairs


def _write(path, text):
    path.write_text(text)
    return str(path)


def test_read_line_pairs_aligns_lines(tmp_path):
    gold = _write(tmp_path / "gold", "(A (B x))\n(C (D y))\n")
    test = _write(tmp_path / "test", "(A (B x))\n\n")

    assert list(read_line_pairs(gold, test)) == [
        (1, "(A (B x))", "(A (B x))"),
        (2, "(C (D y))", ""),
    ]


def test_trailing_blank_lines_are_not_a_mismatch(tmp_path):
    gold = _write(tmp_path / "gold", "(A (B x))\n\n\n")
    test = _write(tmp_path / "test", "(A (B x))\n")
    assert len(list(read_line_pairs(gold, test))) == 1


@pytest.mark.parametrize("gold_text, test_text, side", [
    ("(A (B x))\n(A (B x))\n", "(A (B x))\n", "gold"),
    ("(A (B x))\n", "(A (B x))\n\n(A (B x))\n", "test"),
])
def test_extra_lines_raise(tmp_path, gold_text, test_text, side):
    gold = _write(tmp_path / "gold", gold_text)
    test = _write(tmp_path / "test", test_text)
    with pytest.raises(CorpusAlignmentError, match=f"too many lines in {side} file"):
        list(read_line_pairs(gold, test))


def test_parsed_sentence_accessors():
    sentence = ParsedSentence(
        terminals=[Terminal("a", "DT"), Terminal("dog", "NN")],
        brackets=[BracketSpan(0, 2, "NP")],
        raw_length=2,
    )
    assert len(sentence) == 2
    assert sentence.words() == ["a", "dog"]
    assert sentence.tags() == ["DT", "NN"]
    assert sentence.brackets[0].width == 2


def test_invalid_utf8_bytes_are_replaced(tmp_path):
    gold = tmp_path / "gold"
    test = tmp_path / "test"
    gold.write_bytes(b"(A (B x))\n(S (NN caf\xe9))\n")
    test.write_bytes(b"(A (B x))\n(S (NN caf\xe9))\n")

    pairs = list(read_line_pairs(str(gold), str(test)))
    assert len(pairs) == 2
    assert pairs[1] == (2, "(S (NN caf\ufffd))", "(S (NN caf\ufffd))")

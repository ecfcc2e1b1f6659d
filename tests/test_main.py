import pytest

from main import build_arg_parser, load_config, main

GOLD = "(S (NP (NNX this)) (VP (VBX is) (NP (DT a) (NNX pen))) (SYM .))"
SHIFTED = "(S (NP (NNX this) (VBX is)) (NP (DT a) (NNX pen)) (SYM .))"


@pytest.fixture
def corpus(tmp_path):
    def write(gold_lines, test_lines):
        gold = tmp_path / "gold.mrg"
        test = tmp_path / "test.mrg"
        gold.write_text("".join(line + "\n" for line in gold_lines))
        test.write_text("".join(line + "\n" for line in test_lines))
        return str(gold), str(test)
    return write


def test_clean_run_returns_zero(corpus, capsys):
    gold, test = corpus([GOLD, GOLD], [GOLD, SHIFTED])
    assert main([gold, test, "--no-progress"]) == 0

    out = capsys.readouterr().out
    assert out.splitlines()[0].startswith("  Sent.")
    assert "Bracketing Recall         =  75.00" in out
    assert "-- len<=40 --" in out


def test_errors_are_returned_as_exit_code(corpus):
    gold, test = corpus([GOLD, GOLD, GOLD], [GOLD, "(S (NN x))", SHIFTED])
    assert main([gold, test, "--no-progress"]) == 1


def test_max_errors_aborts_after_threshold(corpus, capsys):
    gold, test = corpus([GOLD, "(S (NN a)", "(S (NN b)", GOLD],
                        [GOLD, "(S (NN a))", "(S (NN b))", GOLD])
    assert main([gold, test, "-e", "1", "--no-progress"]) == 2

    captured = capsys.readouterr()
    assert "Too many errors (2)" in captured.err
    # 途中までの集計は出力される
    assert "Number of sentence        =      3" in captured.out


def test_alignment_mismatch_is_fatal(corpus, capsys):
    gold, test = corpus([GOLD, GOLD], [GOLD])
    assert main([gold, test, "--no-progress"]) == 1
    assert "too many lines in gold file" in capsys.readouterr().err


def test_missing_file_is_fatal(tmp_path, capsys):
    assert main([str(tmp_path / "nope"), str(tmp_path / "nope2"), "--no-progress"]) == 1
    assert "Can't open file" in capsys.readouterr().err


def test_parameter_file_and_overrides(corpus, tmp_path, capsys):
    prm = tmp_path / "test.prm"
    prm.write_text("LABELED 0\nCUTOFF_LEN 3\nMAX_ERROR 5\n")
    args = build_arg_parser().parse_args(["-p", str(prm), "-c", "10", "g", "t"])
    config = load_config(args)

    assert not config.labeled
    assert config.cutoff_len == 10
    assert config.max_errors == 5

    gold, test = corpus([GOLD], [SHIFTED])
    assert main(["-p", str(prm), gold, test, "--no-progress"]) == 0
    assert "-- len<=3 --" in capsys.readouterr().out


def test_bad_parameter_file_is_fatal(tmp_path, capsys):
    assert main(["-p", str(tmp_path / "missing.prm"), "g", "t"]) == 1
    assert "Can't open parameter file" in capsys.readouterr().err


def test_debug_and_tag_report(corpus, capsys):
    gold, test = corpus([GOLD], [SHIFTED])
    assert main([gold, test, "-d", "--tag-report", "--no-progress"]) == 0

    out = capsys.readouterr().out
    assert "produced spurious bracket NP 0 1" in out
    assert "-<1>---" in out
    assert "--- Detailed Tagging Report ---" in out
    assert "SYM" in out


def test_invalid_utf8_line_does_not_stop_the_run(tmp_path, capsys):
    line = b"(S (NP (NN caf\xe9)) (VP (VB b)))\n"
    gold = tmp_path / "gold.mrg"
    test = tmp_path / "test.mrg"
    gold.write_bytes(GOLD.encode() + b"\n" + line + GOLD.encode() + b"\n")
    test.write_bytes(GOLD.encode() + b"\n" + line + SHIFTED.encode() + b"\n")

    assert main([str(gold), str(test), "--no-progress"]) == 0
    out = capsys.readouterr().out
    assert "Number of sentence        =      3" in out
    assert "Bracketing Recall" in out

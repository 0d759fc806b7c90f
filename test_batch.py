import io

import pytest

from expr_batch import BatchFormatError, main, read_batch, run_batch

BATCH = """\
3
x 2
y 0.5 rate
-1
4
x + y * rate
10 - (2 - 3)
(x) / (y - 0.5)
-(x - y) - -y
"""


def run(text):
    out, err = io.StringIO(), io.StringIO()
    failures = run_batch(text.splitlines(), out, err)
    return failures, out.getvalue().splitlines(), err.getvalue().splitlines()


def test_batch_output():
    failures, out, err = run(BATCH)
    assert failures == 0 and err == []
    assert out == [
        "(x + (y * rate))",
        "x + y * rate",
        "1.5",
        "(10 - (2 - 3))",
        "10 - (2 - 3)",
        "11",
        "(x / (y - 0.5))",
        "x / (y - 0.5)",
        "inf",
        "((-(x - y)) - (-y))",
        "-(x - y) - -y",
        "-1",
    ]


def test_batch_errors_do_not_stop_the_run():
    failures, out, err = run("1\nx 1\n4\nx + z\n1 + \nx ? 2\nx * 3\n")
    assert failures == 3
    # Renderings of `x + z` are written before its evaluation fails.
    assert out == ["(x + z)", "x + z", "(x * 3)", "x * 3", "3"]
    assert len(err) == 3 and all(line.startswith("error: ") for line in err)
    assert "'z'" in err[0] and "'?'" in err[2]


def test_batch_rendering_before_undefined_variable():
    failures, out, err = run("0\n1\n-a\n")
    assert failures == 1
    assert out == ["(-a)", "-a"]


def test_batch_signed_zero_and_overflow():
    failures, out, err = run("0\n2\n-0 * 1\n1e999\n")
    assert failures == 0
    assert out == ["((-0) * 1)", "-0 * 1", "-0.0", "1e999", "1e999", "inf"]


def test_blank_expression_lines_are_skipped():
    failures, out, err = run("0\n2\n\n2 * 2\n")
    assert failures == 0
    assert out == ["(2 * 2)", "2 * 2", "4"]


def test_read_batch():
    env, exprs = read_batch(["1 x", "3", "1 trailing words", "x*x"])
    assert env == {"x": 3.0}
    assert exprs == ["x*x"]


@pytest.mark.parametrize(
    "lines",
    [[], ["2", "x 1"], ["1", "x one", "0"], ["many"], ["0", "2", "x"]],
)
def test_read_batch_format_errors(lines):
    with pytest.raises(BatchFormatError):
        read_batch(lines)


def test_main(tmp_path, capsys):
    path = tmp_path / "batch.txt"
    path.write_text(BATCH, encoding="utf-8")
    assert main([str(path)]) == 0
    assert capsys.readouterr().out.splitlines()[:3] == ["(x + (y * rate))", "x + y * rate", "1.5"]

    path.write_text("0\n1\nq\n", encoding="utf-8")
    assert main([str(path)]) == 1
    assert "undefined" in capsys.readouterr().err

    assert main(["a", "b"]) == 2


def test_main_reads_stdin(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("1\nn 7\n1\nn / 2\n"))
    assert main([]) == 0
    assert capsys.readouterr().out.splitlines() == ["(n / 2)", "n / 2", "3.5"]

import logging

import pytest
import structlog

from kategg.cli import main


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()


class TestCLI:
    def test_prove(self, capsys):
        code = main([
            "prove",
            "(star (test alpha))",
            "(par (test 1) (seq (test alpha) (star (test alpha))))",
            "--iter-limit", "5",
        ])
        out = capsys.readouterr().out
        assert code == 0
        assert out.startswith("proved: (star (test alpha)) = ")
        assert "stop reason: other" in out

    def test_not_proved(self, capsys):
        code = main(["prove", "(star pi)", "(test 1)", "--iter-limit", "1"])
        assert code == 1
        assert "not proved" in capsys.readouterr().out

    def test_simplify(self, capsys):
        code = main(["simplify", "(par a 0)", "--iter-limit", "3"])
        assert code == 0
        assert "(par a 0) => a (cost 1)" in capsys.readouterr().out

    def test_config_file(self, tmp_path, capsys):
        path = tmp_path / "limits.yaml"
        path.write_text("iter_limit: 0\n")
        assert main(["simplify", "(par a 0)", "--config", str(path)]) == 0
        out = capsys.readouterr().out
        assert "(par a 0) => (par a 0) (cost 3)" in out
        assert "stop reason: iteration limit reached" in out

    def test_parse_error(self, capsys):
        assert main(["simplify", "(seq a"]) == 2
        assert "error:" in capsys.readouterr().err

    def test_bad_limits(self, capsys):
        assert main(["prove", "a", "b", "--iter-limit", "-1"]) == 2
        assert "error:" in capsys.readouterr().err

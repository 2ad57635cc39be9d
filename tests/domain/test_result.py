from upm_git.domain.diagnostics import Diagnostic, FileLocation, PackageLocation, Severity
from upm_git.domain.result import Result


def test_exit_code_precedence_exec_over_validation():
    r = Result(diagnostics=[
        Diagnostic(code="VAL", rule="r", severity=Severity.ERROR, message="v"),
        Diagnostic(code="EXEC", rule="r", severity=Severity.ERROR, message="e", is_execution=True),
    ])
    assert r.exit_code == 3
    assert not r.ok


def test_warnings_do_not_fail():
    r = Result(value=1, diagnostics=[Diagnostic(code="W", rule="r", severity=Severity.WARN, message="w")])
    assert r.exit_code == 0
    assert r.ok
    assert r.codes() == ["W"]


def test_diagnostic_id_is_deterministic():
    d1 = Diagnostic(code="X", rule="r", severity=Severity.ERROR, message="m", location=FileLocation("a.json"))
    d2 = Diagnostic(code="X", rule="r", severity=Severity.ERROR, message="m", location=FileLocation("a.json"))
    d3 = Diagnostic(code="X", rule="r", severity=Severity.ERROR, message="m", location=PackageLocation("com.a", "1.0"))
    assert d1.id == d2.id
    assert d1.id != d3.id

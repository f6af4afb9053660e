from pathlib import Path

from streamlit.testing.v1 import AppTest

from main import main

APP = str(Path(__file__).resolve().parent.parent / "app.py")


def test_dashboard_renders_report(git_repo, tmp_path, capsys):
    report = tmp_path / "report.json"
    main(["all", "--repo", git_repo, "-m", "john.doe,JohnD=>John", "--output", str(report)])
    capsys.readouterr()

    at = AppTest.from_file(APP, default_timeout=30).run()
    at.text_input[0].set_value(str(report)).run()
    assert not at.exception
    assert at.metric[0].value == "4"

    at.toggle[0].set_value(True).run()
    assert not at.exception
    assert at.subheader[0].value == "Commits per week (cumulative)"

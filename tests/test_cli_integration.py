import json
import subprocess
import sys

from conftest import SAMPLE_LINE


def run_cli(args, env=None):
    return subprocess.run([sys.executable, "-m", "xfernotify.cli", *args], capture_output=True, text=True, env=env)


def write_config(tmp_path, body):
    cfg = tmp_path / "xfernotify.yml"
    cfg.write_text(body, encoding="utf-8")
    return cfg


def test_parse_json_output():
    proc = run_cli(["parse", SAMPLE_LINE, "--json"])
    assert proc.returncode == 0, proc.stderr
    data = json.loads(proc.stdout)
    assert data["user"] == "myuser"
    assert data["direction"] == "outgoing"
    assert data["completion_status"] == "complete"


def test_parse_table_output():
    proc = run_cli(["parse", SAMPLE_LINE, "--no-color"])
    assert proc.returncode == 0, proc.stderr
    assert "hostname.domain.com" in proc.stdout
    assert "file_path" in proc.stdout


def test_parse_invalid_line():
    proc = run_cli(["parse", "this is not xferlog"])
    assert proc.returncode == 1
    assert "invalid line" in proc.stderr


def test_render_template():
    proc = run_cli(["render", "%u %A file %f (%S)", SAMPLE_LINE])
    assert proc.returncode == 0, proc.stderr
    assert proc.stdout.strip() == "myuser downloaded file foo (5 B)"


def test_check_config(tmp_path):
    cfg = write_config(tmp_path, "outputs:\n  file:\n    - path: /tmp/x.log\n  push:\n    - title: hi\n")
    proc = run_cli(["check-config", str(cfg)])
    assert proc.returncode == 0, proc.stderr
    assert "file: 1 instance(s)" in proc.stdout
    assert "push: 1 instance(s)" in proc.stdout
    assert "no token" in proc.stderr
    assert run_cli(["check-config", str(cfg), "--strict"]).returncode == 1


def test_check_config_invalid(tmp_path):
    cfg = write_config(tmp_path, "outputs:\n  push:\n    - token: t\n      filename_filter: '('\n")
    proc = run_cli(["check-config", str(cfg)])
    assert proc.returncode == 2
    assert "filename_filter" in proc.stderr


def test_run_replays_file_into_file_sink(tmp_path):
    source = tmp_path / "saved.xferlog"
    source.write_text(f"garbage line\n{SAMPLE_LINE}\n", encoding="utf-8")
    target = tmp_path / "archive.log"
    cfg = write_config(tmp_path, f"outputs:\n  file:\n    - path: {target}\n")
    proc = run_cli(["run", "--config", str(cfg), "--pipe", str(source), "-v"])
    assert proc.returncode == 0, proc.stderr
    assert target.read_text(encoding="utf-8") == SAMPLE_LINE + "\n"
    assert "Invalid xferlog line" in proc.stderr
    assert "records=1 invalid=1" in proc.stderr


def test_run_missing_config_exits_2(tmp_path):
    proc = run_cli(["run", "--config", str(tmp_path / "absent.yml")])
    assert proc.returncode == 2
    assert "not found" in proc.stderr


def test_run_unopenable_pipe_is_fatal(tmp_path):
    cfg = write_config(tmp_path, "outputs: {}\n")
    proc = run_cli(["run", "--config", str(cfg), "--pipe", str(tmp_path / "absent.pipe"), "--no-create"])
    assert proc.returncode == 1
    assert "does not exist" in proc.stderr

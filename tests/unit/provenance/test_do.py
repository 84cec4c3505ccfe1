import os

import pytest

from readqc.provenance import do


def _script(tmp_path, name, body):
    fname = tmp_path / name
    fname.write_text("#!/bin/sh\n" + body)
    fname.chmod(0o755)
    return str(fname)


def test_run_writes_combined_output_to_log(tmp_path):
    exe = _script(tmp_path, 'tool', 'echo "to stdout $1"\necho "to stderr" >&2\n')
    log_file = str(tmp_path / 'logs' / 'nested' / 's1_tool.log')

    result = do.run(exe, ['arg1'], log_file, sample_id='s1', stage='tool')

    assert result.exit_code == 0
    assert result.sample_id == 's1'
    assert result.stage == 'tool'
    assert result.log_file == log_file
    assert result.duration_ms >= 0
    with open(log_file) as in_handle:
        content = in_handle.read()
    assert 'to stdout arg1' in content
    assert 'to stderr' in content


def test_run_reports_nonzero_exit_without_raising(tmp_path):
    exe = _script(tmp_path, 'failing', 'echo broken\nexit 3\n')
    result = do.run(exe, [], str(tmp_path / 'fail.log'))
    assert result.exit_code == 3


def test_stage_result_is_immutable(tmp_path):
    exe = _script(tmp_path, 'tool', 'exit 0\n')
    result = do.run(exe, [], str(tmp_path / 'ok.log'))
    with pytest.raises(AttributeError):
        result.exit_code = 1


def test_run_missing_tool(tmp_path, monkeypatch):
    monkeypatch.setenv('PATH', str(tmp_path))
    with pytest.raises(do.ToolUnavailable) as excinfo:
        do.run('not-a-real-qc-tool', [], str(tmp_path / 'x.log'))
    assert 'not-a-real-qc-tool' in str(excinfo.value)
    assert not os.path.exists(str(tmp_path / 'x.log'))


def test_run_unwritable_log(tmp_path):
    exe = _script(tmp_path, 'tool', 'exit 0\n')
    blocker = tmp_path / 'blocker'
    blocker.write_text('a file, not a directory')
    with pytest.raises(do.LogWriteFailure):
        do.run(exe, [], str(blocker / 'tool.log'))


def test_run_passes_environment(tmp_path):
    exe = _script(tmp_path, 'tool', 'echo "TZ is $TZ"\n')
    log_file = str(tmp_path / 'env.log')
    do.run(exe, [], log_file, env={'TZ': 'UTC'})
    with open(log_file) as in_handle:
        assert 'TZ is UTC' in in_handle.read()


def test_run_timeout_stops_process(tmp_path):
    exe = _script(tmp_path, 'slow', 'exec sleep 30\n')
    result = do.run(exe, [], str(tmp_path / 'slow.log'), timeout=0.5)
    assert result.exit_code != 0
    assert result.duration_ms < 30000


def test_file_nonempty_check(tmp_path):
    empty = tmp_path / 'empty.fq'
    empty.write_text('')
    full = tmp_path / 'full.fq'
    full.write_text('@r\n')
    assert not do.file_nonempty(str(empty))()
    assert do.file_nonempty(str(full))()
    assert not do.file_nonempty(str(tmp_path / 'missing.fq'))()

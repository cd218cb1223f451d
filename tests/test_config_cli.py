"""
cyclesim - Configuration + CLI Tests

The CLI is driven through main(argv) so exit codes and printed output can
be checked without a subprocess.
"""

import json

import pytest

from cyclesim.cli import main, parse_int_arg
from cyclesim.config import ConfigError, SimConfig, load_config


def _write_config(tmp_path, data):
    path = tmp_path / 'cyclesim.json'
    path.write_text(json.dumps(data), encoding='utf-8')
    return str(path)


# ─── Configuration ─────────────────────

class TestConfig:

    def test_defaults(self):
        config = load_config(None)
        assert config.memory_size == 64
        assert config.base_interval == 1.0
        assert config.speeds == (0.5, 1.0, 2.0)
        assert config.registers()['SP'] == 0

    def test_load_file(self, tmp_path):
        path = _write_config(tmp_path, {
            'memory_size': 128,
            'speeds': [0.5, 1, 2, 4],
            'initial_registers': {'SP': 62},
            'log_level': 'debug',
        })
        config = load_config(path)
        assert config.memory_size == 128
        assert config.speeds == (0.5, 1.0, 2.0, 4.0)
        assert config.registers()['SP'] == 62

    def test_unknown_key(self, tmp_path):
        with pytest.raises(ConfigError, match='colour'):
            load_config(_write_config(tmp_path, {'colour': 'blue'}))

    def test_bad_json(self, tmp_path):
        path = tmp_path / 'bad.json'
        path.write_text('{nope', encoding='utf-8')
        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(str(tmp_path / 'absent.json'))

    def test_not_an_object(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(_write_config(tmp_path, [1, 2]))

    def test_speeds_must_include_normal(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(_write_config(tmp_path, {'speeds': [0.5, 2]}))

    def test_negative_memory_size(self):
        with pytest.raises(ConfigError):
            SimConfig(memory_size=-1).validate()

    def test_non_int_register(self):
        with pytest.raises(ConfigError):
            SimConfig(initial_registers={'AX': 'one'}).validate()

    def test_bad_log_level(self):
        with pytest.raises(ConfigError):
            SimConfig(log_level='LOUD').validate()


# ─── CLI ─────────────────────

class TestParseIntArg:

    def test_forms(self):
        assert parse_int_arg('42') == 42
        assert parse_int_arg('0x2A') == 42
        assert parse_int_arg('60h') == 0x60
        assert parse_int_arg('-3') == -3

    def test_garbage(self):
        with pytest.raises(ValueError):
            parse_int_arg('forty')


class TestCLI:

    def test_list(self, capsys):
        assert main(['list']) == 0
        out = capsys.readouterr().out
        assert 'Math Operations (6)' in out
        assert 'MOV AX, 42' in out
        assert 'Input/Output (2)' in out

    def test_list_one_type(self, capsys):
        assert main(['list', '--type', 'io']) == 0
        out = capsys.readouterr().out
        assert 'IN AX, 60h' in out
        assert 'MOV AX, 42' not in out

    def test_run_json(self, capsys):
        assert main(['-q', 'run', 'DIV CX', '--set', 'AX=10', '--set', 'CX=3',
                     '--format', 'json']) == 0
        data = json.loads(capsys.readouterr().out)
        assert data['instruction'] == 'DIV CX'
        assert [s['phase'] for s in data['steps']] == [
            'fetch', 'decode', 'execute', 'writeback']
        assert data['steps'][2]['registerChanges'] == {'AX': 3, 'DX': 1, 'FLAGS': 0}
        assert data['registers']['AX'] == 3
        assert data['registers']['PC'] == 1

    def test_run_json_memory(self, capsys):
        assert main(['-q', 'run', 'PUSH AX', '--set', 'AX=99', '--set', 'SP=10',
                     '--format', 'json']) == 0
        data = json.loads(capsys.readouterr().out)
        assert data['steps'][3] == {'phase': 'memory', 'description': 'Accessing memory'}
        assert data['memoryChanges'] == {'8': 99}

    def test_run_with_initial_memory(self, capsys):
        assert main(['-q', 'run', 'MOV AX, [100]', '--mem', '100=0x7',
                     '--format', 'json']) == 0
        assert json.loads(capsys.readouterr().out)['registers']['AX'] == 7

    def test_run_text(self, capsys):
        assert main(['-q', 'run', 'PUSH AX', '--set', 'AX=99', '--set', 'SP=10']) == 0
        out = capsys.readouterr().out
        assert out.startswith('PUSH AX')
        assert '[fetch    ] Fetching instruction from memory' in out
        assert 'mem[8]: 0 -> 99' in out
        assert 'after:  AX=0063' in out

    def test_run_narrated(self, capsys):
        assert main(['-q', 'run', 'MOV AX, 42', '--narrate']) == 0
        assert 'recipe card' in capsys.readouterr().out

    def test_run_animated(self, tmp_path, capsys):
        path = _write_config(tmp_path, {'base_interval': 0})
        assert main(['-q', '--config', path, 'run', 'INC CX', '--animate',
                     '--speed', '2']) == 0
        out = capsys.readouterr().out
        assert '[writeback] Writing results back to registers' in out
        assert 'CX=0001' in out

    def test_unknown_mnemonic(self, capsys):
        assert main(['-q', 'run', 'NOP']) == 2

    def test_allow_unknown(self, capsys):
        assert main(['-q', 'run', 'NOP', '--allow-unknown', '--format', 'json']) == 0
        data = json.loads(capsys.readouterr().out)
        assert len(data['steps']) == 4
        assert data['steps'][2]['description'] == 'Executing instruction'

    def test_push_at_address_zero_fails(self, capsys):
        assert main(['-q', 'run', 'PUSH AX']) == 1

    def test_run_dump(self, capsys):
        assert main(['-q', 'run', 'PUSH AX', '--set', 'AX=99', '--set', 'SP=10',
                     '--dump']) == 0
        lines = capsys.readouterr().out.splitlines()
        assert '0008  0063 0000 0000 0000 0000 0000 0000 0000' in lines
        assert lines[-1].startswith('0056  ')

    def test_bad_speed_is_usage_error(self, capsys):
        assert main(['-q', 'run', 'RET', '--speed', '3']) == 2

    def test_speed_from_config(self, tmp_path, capsys):
        path = _write_config(tmp_path, {'base_interval': 0, 'speeds': [0.5, 1, 2, 4]})
        assert main(['-q', '--config', path, 'run', 'RET', '--animate',
                     '--speed', '4']) == 0

    def test_bad_config(self, tmp_path, capsys):
        path = _write_config(tmp_path, {'memory_size': -5})
        assert main(['-q', '--config', path, 'list']) == 2

    def test_bad_assignment_is_usage_error(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(['run', 'RET', '--set', 'AX'])
        assert exc.value.code == 2

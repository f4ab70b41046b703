import yaml
from click.testing import CliRunner

from ypbank.cli import main as cli
from ypbank.formats.bin_format import BinFormat
from ypbank.formats.csv_format import CsvFormat
from ypbank.formats.txt_format import TxtFormat


def write_csv(path, transactions):
    path.write_bytes(CsvFormat().serialize(transactions))


def write_config(tmp_path, **overrides):
    cfg = {
        'format_modules': {
            'csv': 'ypbank.formats.csv_format.CsvFormat',
            'txt': 'ypbank.formats.txt_format.TxtFormat',
            'binary': 'ypbank.formats.bin_format.BinFormat',
        },
        'log_level': 'WARNING',
    }
    cfg.update(overrides)
    path = tmp_path / 'config.yaml'
    with open(path, 'w') as f:
        yaml.safe_dump(cfg, f)
    return path


def test_convert_csv_to_binary(tmp_path, sample_collection):
    src = tmp_path / 'records.csv'
    write_csv(src, sample_collection)

    runner = CliRunner()
    res = runner.invoke(
        cli,
        ['convert', '--input', str(src), '--input-format', 'csv', '--output-format', 'binary']
    )
    assert res.exit_code == 0, res.output
    assert res.stdout_bytes.startswith(b'YPBN\x01')
    assert BinFormat().parse(res.stdout_bytes) == sample_collection


def test_convert_binary_to_txt_with_config(tmp_path, sample_collection):
    src = tmp_path / 'records.bin'
    src.write_bytes(BinFormat().serialize(sample_collection))
    cfg_path = write_config(tmp_path)

    runner = CliRunner()
    res = runner.invoke(
        cli,
        ['--config', str(cfg_path), 'convert', '--input', str(src),
         '--input-format', 'binary', '--output-format', 'txt']
    )
    assert res.exit_code == 0, res.output
    assert TxtFormat().parse(res.stdout_bytes) == sample_collection


def test_convert_rejects_unknown_format_tag(tmp_path, make_tx):
    src = tmp_path / 'records.csv'
    write_csv(src, [make_tx(1)])

    runner = CliRunner()
    res = runner.invoke(
        cli,
        ['convert', '--input', str(src), '--input-format', 'xml', '--output-format', 'csv']
    )
    assert res.exit_code == 2
    assert 'xml' in res.output


def test_convert_reports_parse_errors(tmp_path, make_tx):
    src = tmp_path / 'broken.csv'
    write_csv(src, [make_tx(1)])
    with open(src, 'a') as f:
        f.write('2,2024-01-06,-50\n')

    runner = CliRunner()
    res = runner.invoke(
        cli,
        ['convert', '--input', str(src), '--input-format', 'csv', '--output-format', 'txt']
    )
    assert res.exit_code == 1
    assert 'Error:' in res.output
    assert 'line 3' in res.output
    assert 'broken.csv' in res.output


def test_convert_reports_unsupported_values(tmp_path, make_tx):
    src = tmp_path / 'records.csv'
    write_csv(src, [make_tx(1, currency='USDT')])

    runner = CliRunner()
    res = runner.invoke(
        cli,
        ['convert', '--input', str(src), '--input-format', 'csv', '--output-format', 'binary']
    )
    assert res.exit_code == 1
    assert 'currency' in res.output


def test_compare_identical_files_across_formats(tmp_path, sample_collection):
    left = tmp_path / 'a.csv'
    right = tmp_path / 'b.bin'
    write_csv(left, sample_collection)
    right.write_bytes(BinFormat().serialize(sample_collection))

    runner = CliRunner()
    res = runner.invoke(
        cli,
        ['compare', '--file1', str(left), '--format1', 'csv',
         '--file2', str(right), '--format2', 'binary']
    )
    assert res.exit_code == 0, res.output
    assert res.output.strip() == (
        f"The transaction records in '{left}' and '{right}' are identical."
    )


def test_compare_reports_differences_without_failing(tmp_path, make_tx):
    left = tmp_path / 'a.csv'
    right = tmp_path / 'b.txt'
    write_csv(left, [make_tx(1), make_tx(2), make_tx(3, amount=1000)])
    right.write_bytes(TxtFormat().serialize([make_tx(2), make_tx(3, amount=9999), make_tx(4)]))

    runner = CliRunner()
    res = runner.invoke(
        cli,
        ['compare', '--file1', str(left), '--format1', 'csv',
         '--file2', str(right), '--format2', 'txt']
    )
    assert res.exit_code == 0, res.output
    lines = res.output.strip().splitlines()
    assert lines == [
        f"Transaction 1 is missing in '{right}'.",
        f"Transaction 4 is missing in '{left}'.",
        f"Transaction 3 differs between '{left}' and '{right}': "
        f"amount ({left}: 1000, {right}: 9999)",
    ]


def test_compare_fails_on_parse_error(tmp_path, make_tx):
    left = tmp_path / 'a.csv'
    right = tmp_path / 'b.bin'
    write_csv(left, [make_tx(1)])
    right.write_bytes(b'YPBN\x01\x05\x00\x00\x00')

    runner = CliRunner()
    res = runner.invoke(
        cli,
        ['compare', '--file1', str(left), '--format1', 'csv',
         '--file2', str(right), '--format2', 'binary']
    )
    assert res.exit_code == 1
    assert 'truncated record 1' in res.output


def test_compare_missing_file_is_usage_error(tmp_path, make_tx):
    left = tmp_path / 'a.csv'
    write_csv(left, [make_tx(1)])

    runner = CliRunner()
    res = runner.invoke(
        cli,
        ['compare', '--file1', str(left), '--format1', 'csv',
         '--file2', str(tmp_path / 'nope.csv'), '--format2', 'csv']
    )
    assert res.exit_code == 2


def test_env_file_log_level_is_validated(tmp_path, make_tx):
    src = tmp_path / 'records.csv'
    write_csv(src, [make_tx(1)])
    env_file = tmp_path / '.env'
    env_file.write_text('YPBANK_LOG_LEVEL=chatty\n')

    runner = CliRunner(env={'YPBANK_LOG_LEVEL': None})
    res = runner.invoke(
        cli,
        ['--env-file', str(env_file), 'convert', '--input', str(src),
         '--input-format', 'csv', '--output-format', 'txt']
    )
    assert res.exit_code == 1
    assert "Unknown log level 'CHATTY'" in res.output


def test_bad_config_is_reported(tmp_path, make_tx):
    src = tmp_path / 'records.csv'
    write_csv(src, [make_tx(1)])
    cfg_path = write_config(tmp_path, format_modules={'xml': 'x.Y'})

    runner = CliRunner()
    res = runner.invoke(
        cli,
        ['--config', str(cfg_path), 'convert', '--input', str(src),
         '--input-format', 'csv', '--output-format', 'txt']
    )
    assert res.exit_code == 1
    assert 'Unknown format tag' in res.output

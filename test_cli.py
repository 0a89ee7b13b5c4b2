#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
End-to-end tests for the pontifex command line tool.
Runs main() in-process with files in a temporary directory.
"""

import sys
import os
import io
import logging

import pytest

sys.path.insert(0, os.path.dirname(__file__))

from framing import MESSAGE_BEGIN, MESSAGE_END, format_key
from pontifex import keygen
import pontifex_cli
from pontifex_cli import EXIT_BADARGS, EXIT_FAILURE, EXIT_OK, EXIT_SOFTWARE, main, setup_logging

IDENTITY_TEXT = ''.join(f"{c:02d}" for c in range(1, 55))


def _write(path, text):
    path.write_text(text, encoding='utf-8')
    return str(path)


def test_encrypt_with_password(tmp_path, capsys):
    message = _write(tmp_path / 'plain.txt', "Solitaire\n")
    assert main(['-p', 'cryptonomicon', '-i', message, '-q']) == EXIT_OK
    out = capsys.readouterr().out
    assert out == f"{MESSAGE_BEGIN}\n\nKIRAK SFJAN\n\n{MESSAGE_END}\n"


def test_encrypt_raw_to_file(tmp_path):
    message = _write(tmp_path / 'plain.txt', "aaaaa aaaaa aaaaa")
    output = tmp_path / 'cipher.txt'
    assert main(['--identity', '-r', '-i', message, '-o', str(output)]) == EXIT_OK
    assert output.read_text(encoding='utf-8') == "EXKYI ZSGEH UNTIQ\n"


def test_decrypt_framed_message(tmp_path, capsys):
    message = _write(tmp_path / 'cipher.txt', f"{MESSAGE_BEGIN}\n\nKIRAK SFJAN\n\n{MESSAGE_END}\n")
    assert main(['-d', '-p', 'cryptonomicon', '-i', message, '-q']) == EXIT_OK
    assert capsys.readouterr().out == "SOLIT AIREX\n"


def test_decrypt_raw_from_stdin(monkeypatch, capsys):
    monkeypatch.setattr(sys, 'stdin', io.StringIO("KIRAK SFJAN\n"))
    assert main(['-d', '-r', '-p', 'cryptonomicon', '-q']) == EXIT_OK
    assert capsys.readouterr().out == "SOLIT AIREX\n"


def test_decrypt_unframed_message_fails(tmp_path):
    message = _write(tmp_path / 'cipher.txt', "KIRAK SFJAN\n")
    assert main(['-d', '-p', 'cryptonomicon', '-i', message, '-q']) == EXIT_BADARGS


def test_key_file(tmp_path, capsys):
    key_file = _write(tmp_path / 'my.key', format_key(keygen("cryptonomicon"), raw=False))
    message = _write(tmp_path / 'plain.txt', "SOLITAIRE")
    assert main(['-f', key_file, '-r', '-i', message]) == EXIT_OK
    assert capsys.readouterr().out == "KIRAK SFJAN\n"


def test_missing_key_file_is_bad_argument(tmp_path):
    message = _write(tmp_path / 'plain.txt', "SOLITAIRE")
    missing = str(tmp_path / 'nope.key')
    assert main(['-f', missing, '-i', message, '-q']) == EXIT_BADARGS


def test_negative_length_rejected(tmp_path):
    message = _write(tmp_path / 'plain.txt', "AAAAAAAAAA")
    with pytest.raises(SystemExit) as exc:
        main(['--identity', '-n', '-5', '-i', message])
    assert exc.value.code == 2


def test_key_on_command_line(tmp_path, capsys):
    message = _write(tmp_path / 'plain.txt', "AAAAAAAAAAAAAAA")
    assert main(['-k', IDENTITY_TEXT, '-r', '-i', message]) == EXIT_OK
    assert capsys.readouterr().out == "EXKYI ZSGEH UNTIQ\n"


def test_bad_key_text(tmp_path):
    message = _write(tmp_path / 'plain.txt', "SOLITAIRE")
    assert main(['-k', IDENTITY_TEXT[:-3], '-i', message]) == EXIT_BADARGS


def test_broken_key_is_internal_error(tmp_path):
    # parses with a duplicate warning, but joker A is missing
    message = _write(tmp_path / 'plain.txt', "SOLITAIRE")
    broken = IDENTITY_TEXT[:-4] + "5454"
    assert main(['-k', broken, '-i', message, '-q']) == EXIT_SOFTWARE


def test_stream(capsys):
    assert main(['--identity', '-s', '10']) == EXIT_OK
    assert capsys.readouterr().out == "DWJXH YRFDG\n"


def test_stream_bad_count():
    with pytest.raises(SystemExit) as exc:
        main(['--identity', '-s', 'ten'])
    assert exc.value.code == 2


def test_gen_key(capsys):
    assert main(['--gen-key', 'cryptonomicon', '-r', '-q']) == EXIT_OK
    assert capsys.readouterr().out == format_key(keygen("cryptonomicon"))


def test_gen_key_framed_with_jokers(capsys):
    assert main(['--gen-key', 'cryptonomicon', '-j', '-q']) == EXIT_OK
    out = capsys.readouterr().out
    assert out == format_key(keygen("cryptonomicon", relocate_jokers=True), raw=False)


def test_weak_password_warning(tmp_path, caplog):
    message = _write(tmp_path / 'plain.txt', "SOLITAIRE")
    assert main(['-p', 'short', '-i', message]) == EXIT_OK
    assert "weak password" in caplog.text


def test_no_key():
    with pytest.raises(SystemExit) as exc:
        main(['-e'])
    assert exc.value.code == 2


def test_two_keys():
    with pytest.raises(SystemExit) as exc:
        main(['-p', 'abc', '--identity'])
    assert exc.value.code == 2


def test_empty_input(tmp_path):
    message = _write(tmp_path / 'empty.txt', "")
    assert main(['--identity', '-i', message, '-q']) == EXIT_FAILURE


def test_missing_input_file(tmp_path):
    assert main(['--identity', '-i', str(tmp_path / 'nope.txt'), '-q']) == EXIT_FAILURE


def test_log_levels(monkeypatch):
    root = logging.getLogger()
    setup_logging(quiet=True)
    assert root.level == logging.ERROR
    setup_logging(verbose=1)
    assert root.level == logging.INFO
    setup_logging()
    assert root.level == logging.WARNING
    monkeypatch.setattr(pontifex_cli, "DEBUG_MODE", True)
    setup_logging()
    assert root.level == logging.DEBUG


def test_bad_rounds(tmp_path):
    message = _write(tmp_path / 'plain.txt', "SOLITAIRE")
    assert main(['--identity', '--rounds', '0', '-i', message, '-q']) == EXIT_BADARGS


if __name__ == '__main__':
    sys.exit(pytest.main([__file__, '-v']))

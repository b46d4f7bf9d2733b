import sys
import os
import io

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import main


class TestMain:
    def test_writes_accounts_to_stdout(self, tmp_path, capsys):
        csv_file = tmp_path / "test.csv"
        csv_file.write_text('\n'.join([
            "type, client, tx, amount",
            "deposit, 2, 1, 10",
            "deposit, 1, 2, 1.5",
            "withdrawal, 2, 3, 2.25",
            "dispute, 1, 2,",
            "deposit, 3, 4, 5",
            "dispute, 3, 4,",
            "chargeback, 3, 4,",
        ]))

        exit_code = main.main([str(csv_file)])

        assert exit_code == 0
        assert capsys.readouterr().out.splitlines() == [
            "client,available,held,total,locked",
            "1,0,1.5,1.5,false",
            "2,7.75,0,7.75,false",
            "3,0,0,0,true",
        ]

    def test_reads_stdin(self, monkeypatch, capsys):
        monkeypatch.setattr(sys, "stdin", io.StringIO("type,client,tx,amount\ndeposit,1,1,3\n"))

        assert main.main(["-"]) == 0
        assert capsys.readouterr().out.splitlines()[1] == "1,3,0,3,false"

    def test_missing_file(self, tmp_path, capsys):
        assert main.main([str(tmp_path / "missing.csv")]) == 1
        assert capsys.readouterr().out == ""

    def test_invalid_dispute_window(self, tmp_path, capsys):
        csv_file = tmp_path / "test.csv"
        csv_file.write_text("type,client,tx,amount\n")

        assert main.main([str(csv_file), "--dispute-window", "0"]) == 1
        assert "Invalid configuration" in capsys.readouterr().err

    def test_env_settings_overridden_by_flags(self, monkeypatch):
        monkeypatch.setenv("PAYMENTS_DISPUTE_WINDOW", "10")
        monkeypatch.setenv("PAYMENTS_EVICTION_INTERVAL", "5")

        args = main.build_parser().parse_args(["in.csv", "--dispute-window", "20"])
        settings = main.load_settings(args)

        assert settings.dispute_window == 20
        assert settings.eviction_interval == 5

    def test_invalid_environment_setting(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setenv("PAYMENTS_EVICTION_INTERVAL", "often")
        csv_file = tmp_path / "test.csv"
        csv_file.write_text("type,client,tx,amount\n")

        assert main.main([str(csv_file)]) == 1
        assert "eviction_interval" in capsys.readouterr().err

    def test_large_balance_keeps_every_row(self, tmp_path, capsys):
        csv_file = tmp_path / "test.csv"
        csv_file.write_text("type,client,tx,amount\ndeposit,1,1,2.5\ndeposit,2,2,1000000000000000000000000\n")

        assert main.main([str(csv_file)]) == 0
        assert capsys.readouterr().out.splitlines() == [
            "client,available,held,total,locked",
            "1,2.5,0,2.5,false",
            "2,1000000000000000000000000,0,1000000000000000000000000,false",
        ]

    def test_file_not_utf8(self, tmp_path, capsys):
        csv_file = tmp_path / "test.csv"
        csv_file.write_bytes(b"type,client,tx,amount\ndeposit,1,1,\xff\xfe\n")

        assert main.main([str(csv_file)]) == 1
        assert capsys.readouterr().out == ""

    def test_oversized_field(self, tmp_path, capsys):
        csv_file = tmp_path / "test.csv"
        csv_file.write_text("type,client,tx,amount\ndeposit,1,1," + "9" * 200_000 + "\n")

        assert main.main([str(csv_file)]) == 1
        assert capsys.readouterr().out == ""

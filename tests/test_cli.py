"""
Tests for CLI functionality.

Workflows and version resolution are patched; no network access.
"""

from __future__ import annotations

import argparse
from collections.abc import Iterator
from io import StringIO
from typing import TYPE_CHECKING
from unittest.mock import patch

import pandas as pd
import pytest

from gift_client.analysis.deoverlap import OverlapResolution
from gift_client.cli import (
    cmd_checklists,
    cmd_env,
    cmd_info,
    cmd_no_overlap,
    cmd_references,
    create_parser,
    main,
    parse_raster_args,
)
from gift_client.errors import TransportError, ValidationError
from gift_client.logging_config import reset_logging
from gift_client.schemas import ChecklistCriteria, RefType

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture(autouse=True)
def _clean_logging() -> Iterator[None]:
    yield
    reset_logging()


def _parse(*argv: str) -> argparse.Namespace:
    return create_parser().parse_args(list(argv))


class TestCreateParser:
    """Tests for create_parser function."""

    def test_creates_parser(self) -> None:
        """Parser is created successfully."""
        parser = create_parser()
        assert isinstance(parser, argparse.ArgumentParser)
        assert parser.prog == "gift-client"

    def test_parser_has_version(self) -> None:
        """Parser has version argument."""
        with pytest.raises(SystemExit):
            _parse("--version")

    def test_global_options(self) -> None:
        """--debug and --gift-version precede the command."""
        args = _parse("--debug", "--gift-version", "3.2", "info")
        assert args.debug is True
        assert args.gift_version == "3.2"
        assert args.command == "info"

    def test_checklists_defaults(self) -> None:
        """Checklist options default to the criteria defaults."""
        args = _parse("checklists")
        assert args.taxon == "Tracheophyta"
        assert args.ref_included is None
        assert args.ref_excluded == []
        assert args.complete_taxon is True
        assert args.suit_geo is False

    def test_checklists_options(self) -> None:
        """Checklist switches and lists are parsed."""
        args = _parse(
            "checklists",
            "--taxon",
            "Orchidaceae",
            "--ref-excluded",
            "10",
            "22",
            "--type-ref",
            "Flora",
            "Checklist",
            "--suit-geo",
            "--no-complete-taxon",
        )
        assert args.ref_excluded == [10, 22]
        assert args.type_ref == ["Flora", "Checklist"]
        assert args.suit_geo is True
        assert args.complete_taxon is False

    def test_checklists_rejects_unknown_type(self) -> None:
        """Unknown reference types are rejected by argparse."""
        with pytest.raises(SystemExit):
            _parse("checklists", "--type-ref", "Blog")

    def test_env_defaults(self) -> None:
        """Env command defaults to area and mean."""
        args = _parse("env")
        assert args.entity_ids is None
        assert args.misc == ["area"]
        assert args.raster == []
        assert args.sumstat == ["mean"]
        assert args.strict is False

    def test_no_overlap_requires_ids(self) -> None:
        """no-overlap needs --entity-ids."""
        with pytest.raises(SystemExit):
            _parse("no-overlap")

    def test_no_overlap_thresholds(self) -> None:
        """Thresholds default to the resolver defaults."""
        args = _parse("no-overlap", "--entity-ids", "1", "2")
        assert args.entity_ids == [1, 2]
        assert args.area_th_mainland == 100.0
        assert args.area_th_island == 0.0
        assert args.overlap_th == 0.1


class TestParseRasterArgs:
    """Tests for LAYER[:STAT,STAT] parsing."""

    def test_default_statistics(self) -> None:
        """Layers without statistics use the defaults."""
        specs = parse_raster_args(["mn30_grd"], ["mean", "max"])
        assert specs[0].layer == "mn30_grd"
        assert specs[0].column_names == ["mean_mn30_grd", "max_mn30_grd"]

    def test_own_statistics(self) -> None:
        """Statistics after ':' override the defaults."""
        specs = parse_raster_args(["wc2.0_bio_30s_01:min,med", "mn30_grd"], ["mean"])
        assert specs[0].column_names == ["min_wc2.0_bio_30s_01", "med_wc2.0_bio_30s_01"]
        assert specs[1].column_names == ["mean_mn30_grd"]

    def test_unknown_statistic(self) -> None:
        """Unknown statistics raise ValidationError."""
        with pytest.raises(ValidationError):
            parse_raster_args(["mn30_grd:average"], ["mean"])


class TestCmdInfo:
    """Tests for cmd_info function."""

    def test_returns_zero(self) -> None:
        """Info command returns exit code 0."""
        assert cmd_info(argparse.Namespace()) == 0

    def test_prints_app_info(self) -> None:
        """Info command prints application information."""
        with patch("sys.stdout", new=StringIO()) as mock_stdout:
            cmd_info(argparse.Namespace())
            output = mock_stdout.getvalue()
        assert "Application" in output
        assert "API" in output


class TestCmdReferences:
    """Tests for cmd_references function."""

    def test_writes_csv_file(self, tmp_path: Path) -> None:
        """Reference table is written to --output."""
        out = tmp_path / "refs.csv"
        args = argparse.Namespace(gift_version="3.2", output=out)
        refs = pd.DataFrame({"ref_ID": [1, 2], "ref_long": ["Flora A", "Flora B"]})

        with (
            patch("gift_client.cli.resolve_version", return_value="3.2") as mock_resolve,
            patch("gift_client.cli.fetch_references", return_value=refs) as mock_fetch,
        ):
            assert cmd_references(args) == 0

        mock_resolve.assert_called_once_with("3.2")
        mock_fetch.assert_called_once_with("3.2")
        assert pd.read_csv(out)["ref_ID"].tolist() == [1, 2]


class TestCmdChecklists:
    """Tests for cmd_checklists function."""

    def test_builds_criteria(self, capsys: pytest.CaptureFixture[str]) -> None:
        """CLI options become ChecklistCriteria."""
        args = _parse("--gift-version", "3.2", "checklists", "--taxon", "Orchidaceae", "--end-ref")
        result = pd.DataFrame({"entity_ID": [5], "list_ID": [9]})

        with (
            patch("gift_client.cli.resolve_version", return_value="3.2"),
            patch(
                "gift_client.cli.workflows.checklist_conditional", return_value=result
            ) as mock_flow,
        ):
            assert cmd_checklists(args) == 0

        criteria, version = mock_flow.call_args[0]
        assert isinstance(criteria, ChecklistCriteria)
        assert criteria.taxon_name == "Orchidaceae"
        assert criteria.end_ref is True
        assert criteria.type_ref == tuple(RefType)
        assert version == "3.2"
        assert "entity_ID,list_ID" in capsys.readouterr().out


class TestCmdEnv:
    """Tests for cmd_env function."""

    def test_passes_specs_and_strict(self) -> None:
        """Raster arguments and --strict reach get_env."""
        args = _parse(
            "env", "--entity-ids", "1", "2", "--raster", "mn30_grd", "--strict", "--sumstat", "max"
        )

        with (
            patch("gift_client.cli.resolve_version", return_value="3.2"),
            patch("gift_client.cli.workflows.get_env", return_value=pd.DataFrame()) as mock_env,
            patch("sys.stdout", new=StringIO()),
        ):
            assert cmd_env(args) == 0

        ids, misc, specs, version = mock_env.call_args[0]
        assert ids == [1, 2]
        assert misc == ["area"]
        assert specs[0].column_names == ["max_mn30_grd"]
        assert version == "3.2"
        assert mock_env.call_args[1] == {"strict": True}


class TestCmdNoOverlap:
    """Tests for cmd_no_overlap function."""

    def test_prints_resolution(self) -> None:
        """Retained and removed IDs are printed."""
        args = _parse("no-overlap", "--entity-ids", "1", "2", "--overlap-th", "0.2")
        resolution = OverlapResolution(retained=[2], removed=[1], replaced_by={1: 2})

        with (
            patch("gift_client.cli.resolve_version", return_value="3.2"),
            patch("gift_client.cli.workflows.no_overlap", return_value=resolution) as mock_flow,
            patch("sys.stdout", new=StringIO()) as mock_stdout,
        ):
            assert cmd_no_overlap(args) == 0
            output = mock_stdout.getvalue()

        assert mock_flow.call_args[1]["overlap_th"] == 0.2
        assert "retained: 2" in output
        assert "removed: 1" in output


class TestMain:
    """Tests for main function."""

    def test_no_command_shows_help(self) -> None:
        """No command shows help and exits 0."""
        with patch("sys.stdout", new=StringIO()):
            assert main([]) == 0

    def test_info_command_executes(self) -> None:
        """Info command executes successfully."""
        with patch("gift_client.cli.cmd_info") as mock_cmd:
            mock_cmd.return_value = 0
            assert main(["info"]) == 0
            mock_cmd.assert_called_once()

    def test_gift_error_returns_one(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Library errors are reported on stderr with exit code 1."""
        with patch(
            "gift_client.cli.resolve_version", side_effect=TransportError("GIFT API unreachable")
        ):
            exit_code = main(["references"])

        assert exit_code == 1
        assert "GIFT API unreachable" in capsys.readouterr().err

    def test_validation_error_returns_one(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Bad raster statistics fail before any fetch."""
        with patch("gift_client.cli.resolve_version") as mock_resolve:
            exit_code = main(["env", "--raster", "mn30_grd:average"])

        assert exit_code == 1
        mock_resolve.assert_not_called()
        assert "Error:" in capsys.readouterr().err

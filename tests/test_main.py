"""Tests for the command-line entry point."""

import main
from core.models import ChecklistItem, ItemStatus, Packet, Section


def test_format_packet() -> None:
    packet = Packet(
        title="cells",
        sections=[Section(title="Membranes", content="Lipids", page_reference="p. 1")],
        checklist_items=[ChecklistItem(title="Draw a membrane", page_reference="p. 1"),
                         ChecklistItem(title="Review")],
    )

    assert main.format_packet(packet) == (
        "# cells\n\n## Membranes (p. 1)\nLipids\n\n## Checklist\n"
        "- [ ] Draw a membrane [p. 1]\n- [ ] Review"
    )


def test_parse_args() -> None:
    args = main.parse_args(["reader.pdf", "--structure", "--save"])
    assert args.pdf.name == "reader.pdf"
    assert args.structure and args.save
    assert args.settings is None


def test_main_reports_bad_input(tmp_path, monkeypatch, capsys) -> None:
    monkeypatch.setattr(main, "setup_logging", lambda level: None)
    settings = tmp_path / "settings.json"
    missing = tmp_path / "missing.pdf"

    assert main.main([str(missing), "--settings", str(settings)]) == 1
    assert "File not found" in capsys.readouterr().err


def test_format_packet_shows_item_status() -> None:
    done = ChecklistItem(title="Read")
    done.update_status(ItemStatus.COMPLETED)
    stuck = ChecklistItem(title="Summarize", page_reference="p. 4")
    stuck.update_status(ItemStatus.IN_PROGRESS)
    packet = Packet(title="cells", checklist_items=[done, stuck])

    assert main.format_packet(packet).splitlines()[-2:] == [
        "- [x] Read",
        "- [ ] Summarize [p. 4] (In Progress)",
    ]

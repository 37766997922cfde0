"""
Tests for the IntelliJ merge-window approval.

The IDE itself is replaced by a runner that edits the merge output file the
way a user would.
"""

from pathlib import Path

from agentgate.ide_diff import ApprovalResult, IntelliJDiffApproval, default_intellij_paths


def fake_idea(tmp_path: Path) -> str:
    exe = tmp_path / "idea"
    exe.write_text("#!/bin/sh\n")
    return str(exe)


class TestDefaultPaths:
    """Tests for install path candidates."""

    def test_platform_specific_candidates(self):
        assert any("Applications" in p for p in default_intellij_paths("darwin"))
        assert any(p.endswith("idea64.exe") for p in default_intellij_paths("win32"))
        assert "/usr/bin/idea" in default_intellij_paths("linux")


class TestIntelliJDiffApproval:
    """Tests for IntelliJDiffApproval."""

    def test_unavailable_without_executable(self, tmp_path):
        approval = IntelliJDiffApproval(candidate_paths=[str(tmp_path / "missing")])
        assert not approval.is_available()
        assert approval.request_approval("a.py", "old", "new") is ApprovalResult.IDE_NOT_AVAILABLE

    def test_accepting_proposed_side_approves(self, tmp_path):
        seen: list[list[str]] = []

        def accept(args: list[str]) -> None:
            seen.append(args)
            _, command, base, proposed, output = args
            assert command == "merge"
            assert Path(base).read_text() == "old"
            Path(output).write_text(Path(proposed).read_text())

        approval = IntelliJDiffApproval(candidate_paths=[fake_idea(tmp_path)], runner=accept)
        assert approval.request_approval("src/a.py", "old", "new") is ApprovalResult.APPROVED
        assert seen[0][2].endswith(".py")

    def test_closing_without_saving_rejects(self, tmp_path):
        approval = IntelliJDiffApproval(candidate_paths=[fake_idea(tmp_path)], runner=lambda args: None)
        assert approval.request_approval("a.txt", "old", "new") is ApprovalResult.REJECTED

    def test_temporary_files_are_removed(self, tmp_path):
        created: list[Path] = []

        def record(args: list[str]) -> None:
            created.extend(Path(p) for p in args[2:])

        approval = IntelliJDiffApproval(candidate_paths=[fake_idea(tmp_path)], runner=record)
        approval.request_approval("a.txt", "old", "new")

        assert created
        assert not any(p.exists() for p in created)

    def test_launch_failure_reports_not_available(self, tmp_path):
        def broken(args: list[str]) -> None:
            raise FileNotFoundError("idea")

        approval = IntelliJDiffApproval(candidate_paths=[fake_idea(tmp_path)], runner=broken)
        assert approval.request_approval("a.txt", "old", "new") is ApprovalResult.IDE_NOT_AVAILABLE

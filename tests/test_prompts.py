from stacksmith.prompts import (
    FixPrPromptModel,
    FixPrState,
    StackPromptModel,
    SyncPromptModel,
    SyncStep,
    parse_branch_lines,
    run_sync_prompt,
)
from stacksmith.widgets import SelectableList


def _type(model, text):
    for char in text:
        model.update(char)


# Stack prompt


def test_stack_typing_builds_new_branch():
    model = StackPromptModel(parent_branch="develop")
    _type(model, "feat")
    assert model.new_branch == "feat"
    assert model.cursor_pos == len("feat")
    assert model.parent_branch == "develop"


def test_stack_enter_with_empty_name_sets_error():
    model = StackPromptModel()
    assert model.update("enter") is False
    assert model.error_msg == "New branch name cannot be empty"
    assert model.current_field == 0


def test_stack_enter_moves_to_parent_field_then_finishes():
    model = StackPromptModel(parent_branch="develop")
    _type(model, "x")
    assert model.update("enter") is False
    assert model.current_field == 1
    assert model.cursor_pos == len("develop")
    assert model.update("enter") is True
    assert model.cancelled is False


def test_stack_empty_parent_is_rejected():
    model = StackPromptModel(parent_branch="ab")
    _type(model, "x")
    model.update("enter")
    model.update("backspace")
    model.update("backspace")
    assert model.parent_branch == ""
    assert model.update("enter") is False
    assert model.error_msg == "Parent branch name cannot be empty"


def test_stack_backspace_and_cursor_movement():
    model = StackPromptModel()
    _type(model, "abc")
    model.update("left")
    model.update("backspace")
    assert model.new_branch == "ac"
    model.update("Z")
    assert model.new_branch == "aZc"
    model.update("right")
    model.update("right")
    assert model.cursor_pos == len("aZc")


def test_stack_tab_needs_a_name_to_switch():
    model = StackPromptModel(parent_branch="develop")
    model.update("tab")
    assert model.current_field == 0
    _type(model, "n")
    model.update("tab")
    assert model.current_field == 1
    model.update("tab")
    assert model.current_field == 0
    assert model.cursor_pos == len("n")


def test_stack_escape_cancels():
    model = StackPromptModel()
    assert model.update("esc") is True
    assert model.cancelled is True
    assert model.render_error() == ""


def test_stack_view_shows_fields():
    model = StackPromptModel(parent_branch="develop")
    _type(model, "topic")
    text = model.view()
    assert "New branch name: " in text
    assert "topic" in text
    assert "Parent branch: develop" in text
    assert "Tab: Switch fields" in text


# Sync prompt


def test_sync_enter_selects_current_and_requires_two():
    model = SyncPromptModel(branch_list=SelectableList(["main", "a", "b"]))
    model.update("enter")
    assert model.branch_list.selected_items() == ["main"]
    assert model.error_msg == "Please select at least 2 branches to sync"
    assert model.step is SyncStep.SELECTING_BRANCHES


def test_sync_selection_order_and_confirmation():
    model = SyncPromptModel(branch_list=SelectableList(["main", "a", "b"]))
    model.update("down")
    model.update("down")
    model.update(" ")
    model.update("up")
    model.update("up")
    model.update(" ")
    assert model.update("enter") is False
    assert model.step is SyncStep.CONFIRMING_SELECTION
    assert model.branch_list.selected_items() == ["b", "main"]
    text = model.view()
    assert "b (base)" in text
    assert "main ← b" in text
    assert model.update("enter") is True


def test_sync_empty_list_does_not_crash():
    model = SyncPromptModel()
    model.update(" ")
    model.update("enter")
    assert model.branch_list.selected_count() == 0
    assert model.error_msg == "Please select at least 2 branches to sync"


def test_sync_cancel():
    model = SyncPromptModel(branch_list=SelectableList(["main"]))
    assert model.update("ctrl+c") is True
    assert model.cancelled is True


# Fix-pr prompt


def test_fix_pr_target_cannot_be_itself():
    model = FixPrPromptModel.for_branches(["main", "feature"])
    model.update("down")
    model.update("enter")
    assert model.selected_branch == "feature"
    assert model.state is FixPrState.SELECTING_TARGET
    model.update("down")
    model.update("enter")
    assert model.error_msg == "Branch cannot target itself"
    assert model.state is FixPrState.SELECTING_TARGET


def test_fix_pr_full_flow():
    model = FixPrPromptModel.for_branches(["main", "feature"])
    model.update("down")
    model.update("enter")
    assert "Selected branch: " in model.view()
    model.update("enter")
    assert model.target_branch == "main"
    assert model.state is FixPrState.CONFIRMING
    assert "Ready to rebase:" in model.view()
    assert model.update("enter") is True


def test_fix_pr_escape_cancels():
    model = FixPrPromptModel.for_branches(["main"])
    assert model.update("esc") is True
    assert model.cancelled is True


# Helpers


def test_parse_branch_lines_strips_current_marker():
    assert parse_branch_lines("* main\n  feature\n") == ["main", "feature"]


def test_parse_branch_lines_empty_output():
    assert parse_branch_lines("") == []


def test_run_sync_prompt_outside_repository(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path.parent))
    assert run_sync_prompt() is None
    assert "Error getting branches" in capsys.readouterr().out
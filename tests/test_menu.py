import io

import pytest

from stacksmith import styles
from stacksmith.menu import MenuItem, MenuModel, default_choices, run_menu, run_model


@pytest.fixture
def model():
    return MenuModel(choices=default_choices())


def test_default_choices_commands():
    commands = [item.command for item in default_choices()]
    assert commands == ["stack", "sync", "fix-pr", "push", "graph", "tui", "quit"]


def test_down_then_enter_selects(model):
    assert model.update("down") is False
    assert model.update("j") is False
    assert model.cursor == 2
    assert model.update("enter") is True
    assert model.selected == "fix-pr"


def test_up_stops_at_top(model):
    model.update("up")
    model.update("k")
    assert model.cursor == 0


def test_down_stops_at_bottom(model):
    for _ in range(20):
        model.update("down")
    assert model.cursor == len(model.choices) - 1


def test_space_selects(model):
    assert model.update(" ") is True
    assert model.selected == "stack"


@pytest.mark.parametrize("key", ["q", "ctrl+c"])
def test_quit_keys_leave_nothing_selected(model, key):
    assert model.update(key) is True
    assert model.selected == ""


def test_unknown_key_is_ignored(model):
    assert model.update("x") is False
    assert model.cursor == 0
    assert model.selected == ""


def test_view_lists_every_choice(model):
    view = model.view()
    for item in model.choices:
        assert item.title in view
        assert item.desc in view
    assert view.endswith(styles.format_help_text("↑/↓: Navigate • Enter: Select • q: Quit"))


def test_view_marks_only_cursor_row(model):
    model.update("down")
    view = model.view()
    marker = styles.cursor_style(True)
    assert view.count(marker) == 1
    assert styles.SELECTED.render("🧽 Sync") in view


def test_view_with_custom_items():
    menu = MenuModel(choices=[MenuItem("One", "first", "1", "one")])
    assert menu.update("enter") is True
    assert menu.selected == "one"
    assert "first" in menu.view()


def test_run_model_requires_terminal(monkeypatch, model):
    monkeypatch.setattr("sys.stdin", io.StringIO(""))
    with pytest.raises(RuntimeError):
        run_model(model)


def test_run_menu_exits_without_terminal(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO(""))
    with pytest.raises(SystemExit) as info:
        run_menu()
    assert info.value.code == 1
    assert "Error running menu:" in capsys.readouterr().out
from __future__ import annotations

import pytest


pytest.importorskip("PySide6")
pytest.importorskip("vispy")


def test_app_modules_import_without_launching() -> None:
    import solenoid_field.app  # noqa: F401
    import solenoid_field.app.main  # noqa: F401
    import solenoid_field.app.viewport  # noqa: F401
    import solenoid_field.app.window  # noqa: F401

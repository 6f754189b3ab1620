"""GUI layer: PyQt6 main window and KaTeX output widget."""

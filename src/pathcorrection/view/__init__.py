"""Qt widgets: main window, control panel and the PyVista viewport."""

"""
The VIEW layer holds the Qt widgets and the PyVista preview.
It reads from the model and forwards user actions to it.
"""

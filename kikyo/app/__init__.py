"""Application composition layer for the Tkinter settings window.

``main`` wires views, view models and adapters together; views stay free of
backend calls and profile rules.
"""

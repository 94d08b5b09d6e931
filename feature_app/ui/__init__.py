"""
Mount point model.

A small retained element tree with selector lookup, standing in for the
page markup each component locates its root elements in.
"""

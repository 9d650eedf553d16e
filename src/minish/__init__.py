"""
A small command language with variables, control flow, functions and pipes.
"""

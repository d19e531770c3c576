"""Discrete exterior calculus over digital sets

Cells of an integer grid are addressed through Khalimsky coordinates, see `pykdec.khalimsky`;
the calculus and its forms and operators live in `pykdec.calculus`.
"""

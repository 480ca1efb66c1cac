"""Pieces of a small hobby kernel: text formatting, framebuffer drawing, allocators, page tables, code relocation, ELF parsing and process scheduling."""

__version__ = "0.1.0"
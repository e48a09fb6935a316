"""
vitrina: comparador y listado filtrable de propiedades sobre Supabase.
"""

__version__ = "0.1.0"

"""docdrift: posts blog API and documentation maintenance tools."""

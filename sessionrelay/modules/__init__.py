"""
sessionrelay modules.

Each sub-package is a black box with a small public interface exported from
its __init__.py.
"""

__title__ = 'srcbuild'
__version__ = '0.1.0'

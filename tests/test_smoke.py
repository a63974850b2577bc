def test_smoke_import():
    import importlib.util
    spec = importlib.util.find_spec('hawaii_parcels')
    assert spec is not None
    # simple import to ensure module can be imported
    module = __import__('hawaii_parcels')
    assert hasattr(module, 'HawaiiParcelService')
    assert hasattr(module, '__version__')

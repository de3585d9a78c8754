"""Smoke test to verify the toolchain works."""


def test_import_pacemaker():
    """Verify the pacemaker package can be imported."""
    import pacemaker

    assert pacemaker.__version__


def test_subpackages_importable():
    """Verify all subpackages can be imported."""
    import pacemaker.geo
    import pacemaker.pacing
    import pacemaker.reporting
    import pacemaker.storage
    import pacemaker.tracking
    import pacemaker.tts
    import pacemaker.web.app

    assert pacemaker.geo is not None
    assert pacemaker.tracking is not None
    assert pacemaker.pacing is not None
    assert pacemaker.storage is not None
    assert pacemaker.reporting is not None
    assert pacemaker.tts is not None
    assert pacemaker.web.app.app is not None

"""
artnet-fixtures package
"""
# Lazy imports keep the Flask stack out of library use
__all__ = ['FixtureInstance', 'InstanceStatus', 'RestAPI', 'ArtNetSender', 'ConfigValidator',
           'build_registries', 'compose']


def __getattr__(name):
    if name == 'FixtureInstance':
        from .instance import FixtureInstance
        return FixtureInstance
    elif name == 'InstanceStatus':
        from .instance import InstanceStatus
        return InstanceStatus
    elif name == 'RestAPI':
        from .rest_api import RestAPI
        return RestAPI
    elif name == 'ArtNetSender':
        from .sender import ArtNetSender
        return ArtNetSender
    elif name == 'ConfigValidator':
        from .config_schema import ConfigValidator
        return ConfigValidator
    elif name == 'build_registries':
        from .registry import build_registries
        return build_registries
    elif name == 'compose':
        from .compositor import compose
        return compose
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

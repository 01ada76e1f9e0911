from odlauncher.models.mount import AuthTokens, MountInfo, MountOperationResult

__all__ = [
    'AuthTokens',
    'MountInfo',
    'MountOperationResult',
]

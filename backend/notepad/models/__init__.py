from .blob import BlobObject

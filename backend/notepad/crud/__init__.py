from .crud_blob import blob
from .crud_admin import admin
from .crud_share import share, record_view_detached

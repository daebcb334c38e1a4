# Import all the models, so that Base has them before being
# imported by create_all
from notepad.db.base_class import Base  # noqa
from notepad.models.blob import BlobObject  # noqa

from chainerloss.utils.bbox.loc_loss_weights import loc_loss_weights  # NOQA
from chainerloss.utils.testing import ConstantStubLink  # NOQA

from chainerloss.functions.smooth_l1_loss_with_weights import SmoothL1LossWithWeights  # NOQA
from chainerloss.functions.smooth_l1_loss_with_weights import smooth_l1_loss_with_weights  # NOQA

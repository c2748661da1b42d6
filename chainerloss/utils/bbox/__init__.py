from chainerloss.utils.bbox.loc_loss_weights import loc_loss_weights  # NOQA

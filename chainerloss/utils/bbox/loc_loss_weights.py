import numpy as np

from chainer.backends import cuda


def loc_loss_weights(label, n_loc=4, dtype=np.float32):
    """Computes inside and outside weights for a localization loss.

    Here are notations.

    * :math:`R` is the number of sampled bounding boxes.

    The inside weights select the bounding boxes whose locations are
    regressed. They are one for positive samples (:obj:`label > 0`)
    and zero for the rest. The outside weights normalize the loss by
    the number of samples that are not ignored (:obj:`label >= 0`).
    Ignored samples (:obj:`label == -1`) get zero outside weights.

    Args:
        label (array): An integer array whose shape is :math:`(R,)`.
            Zero stands for the background and :math:`-1` for an
            ignored sample.
        n_loc (int): The number of location values per bounding box.
        dtype: The dtype of the returned arrays.

    Returns:
        tuple of two arrays:
        :obj:`inside_weight` and :obj:`outside_weight`.
        Their shapes are :math:`(R, n\\_loc)`.

    """
    if label.ndim != 1:
        raise ValueError(
            'label must be a one-dimensional array: {}'.format(label.shape))

    xp = cuda.get_array_module(label)
    inside_weight = xp.zeros((label.shape[0], n_loc), dtype=dtype)
    outside_weight = xp.zeros_like(inside_weight)

    # Localization loss is calculated only for positive samples.
    inside_weight[label > 0] = 1
    # Normalize by total number of negative and positive samples.
    n_sample = int((label >= 0).sum())
    if n_sample > 0:
        outside_weight[label >= 0] = 1. / n_sample
    return inside_weight, outside_weight

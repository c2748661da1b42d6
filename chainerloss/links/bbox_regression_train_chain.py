import chainer

from chainerloss.functions import smooth_l1_loss_with_weights
from chainerloss.utils import loc_loss_weights


class BBoxRegressionTrainChain(chainer.Chain):

    """Calculate a bounding box regression loss and report it.

    The predictor maps an input to locations of sampled bounding boxes.
    Only positive samples contribute to the loss, and the loss is
    normalized by the number of samples that are not ignored. This
    follows the localization loss of Fast R-CNN [#]_.

    .. [#] Ross Girshick. Fast R-CNN. ICCV 2015.

    Args:
        predictor (callable): A link or a function that takes
            :obj:`x` and returns predicted locations whose shape is
            :math:`(R, 4)`.
        sigma (float): Sigma parameter for the localization loss.
        num (int): Normalizer passed to
            :func:`~chainerloss.functions.smooth_l1_loss_with_weights`.
            Since the outside weights already divide by the number of
            samples, the default is one.

    """

    def __init__(self, predictor, sigma=1., num=1):
        super(BBoxRegressionTrainChain, self).__init__()
        with self.init_scope():
            self.predictor = predictor
        self.sigma = sigma
        self.num = num

    def forward(self, x, gt_loc, gt_label):
        """Forward the predictor and calculate the loss.

        Here are notations used.

        * :math:`R` is the number of sampled bounding boxes.

        Args:
            x (~chainer.Variable or :ref:`ndarray`): An input of the
                predictor.
            gt_loc (~chainer.Variable or :ref:`ndarray`): Ground truth
                locations. Its shape is :math:`(R, 4)`.
            gt_label (~chainer.Variable or :ref:`ndarray`): Labels of the
                samples. Its shape is :math:`(R,)`. Positive values are
                foreground classes, zero is the background and
                :math:`-1` is ignored.

        Returns:
            chainer.Variable:
            Loss scalar variable.

        """
        if isinstance(gt_loc, chainer.Variable):
            gt_loc = gt_loc.array
        if isinstance(gt_label, chainer.Variable):
            gt_label = gt_label.array

        loc = self.predictor(x)
        inside_weight, outside_weight = loc_loss_weights(
            gt_label, n_loc=loc.shape[1], dtype=loc.dtype)
        loc_loss = smooth_l1_loss_with_weights(
            loc, gt_loc, inside_weight, outside_weight,
            sigma=self.sigma, num=self.num)

        chainer.reporter.report({'loc_loss': loc_loss}, self)
        return loc_loss

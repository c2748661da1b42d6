import warnings

import chainer
from chainer.backends import cuda

from chainerloss.errors import InvalidArgument
from chainerloss.errors import ShapeMismatch
from chainerloss.functions.smooth_l1_loss_with_weights import _check_num
from chainerloss.functions.smooth_l1_loss_with_weights import _check_sigma
from chainerloss.functions.smooth_l1_loss_with_weights import _grad_scale
from chainerloss.functions.smooth_l1_loss_with_weights import _normalizer
from chainerloss.functions.smooth_l1_loss_with_weights import _smooth_l1
from chainerloss.functions.smooth_l1_loss_with_weights import \
    _smooth_l1_grad


def _is_reusable(array, like):
    return (array is not None and
            array.shape == like.shape and
            array.dtype == like.dtype and
            cuda.get_array_module(array) is cuda.get_array_module(like))


class SmoothL1CriterionWithWeights(object):

    """Smooth L1 criterion with inside and outside weights.

    This criterion computes the localization loss used to train bounding
    box regressors [#]_ and its gradient with respect to the input.
    A target is either a ground truth array alone, or a tuple
    :obj:`(gt, inside_weight, outside_weight)`. The residual is
    :math:`d = (x - gt) * inside\\_weight` and each element contributes

    .. math::

        f(d) = \\begin{cases}
            0.5 \\sigma^2 d^2 & (|d| < 1 / \\sigma^2) \\\\
            |d| - 0.5 / \\sigma^2 & (\\text{otherwise})
        \\end{cases}

    multiplied by :math:`outside\\_weight`. The sum is divided by
    :obj:`num`, or by the size of the first axis of the input when
    :obj:`num` is not positive. :meth:`backward` divides the gradient by
    :obj:`num` as well, but when :obj:`num` is not positive it multiplies
    the gradient by the size of the first axis instead of dividing it.

    :meth:`forward` keeps the residual in :attr:`diff` and
    :meth:`backward` consumes it, so the two methods are expected to be
    called in that order with the same arguments. If :meth:`backward`
    finds no residual left by a matching :meth:`forward`, the residual is
    recomputed and a :class:`RuntimeWarning` is issued. Setting
    :obj:`chainer.config.loss_reuse_diff` to :obj:`False` makes
    :meth:`backward` always recompute the residual.

    The scratch arrays :attr:`diff`, :attr:`buffer` and
    :attr:`grad_input` are reused across calls as long as the shape and
    dtype of the input do not change. An instance must not be shared
    between threads.

    .. [#] Ross Girshick. Fast R-CNN. ICCV 2015.

    Args:
        sigma (float): Controls the width of the quadratic region.
            This should be positive.
        num (int): Normalizer of the loss. If this is not positive,
            the size of the first axis of the input is used.

    """

    def __init__(self, sigma, num=0):
        _check_sigma(sigma)
        _check_num(num)
        self.sigma = sigma
        self.sigma2 = sigma * sigma
        self.num = num

        self.diff = None
        self.buffer = None
        self.grad_input = None
        self.has_weights = False
        self._diff_ready = False

    def __repr__(self):
        return '{}(sigma={}, num={})'.format(
            self.__class__.__name__, self.sigma, self.num)

    def _check_target(self, x, target):
        if isinstance(target, (tuple, list)):
            target = tuple(target)
        else:
            target = target,
        if len(target) != 1 and len(target) != 3:
            raise InvalidArgument(
                'target must supply ground truth alone, or ground truth '
                'plus inside/outside weights: got {} arrays'
                .format(len(target)))
        if x.ndim == 0:
            raise InvalidArgument('input must have at least one axis')
        if x.dtype.kind != 'f':
            raise InvalidArgument(
                'input must be a floating point array: {}'.format(x.dtype))

        gt = target[0]
        if len(target) == 1:
            if x.size != gt.size:
                raise ShapeMismatch(
                    'the length of input and bbox target must be equal: '
                    '{} != {}'.format(x.size, gt.size))
            return gt.reshape(x.shape), None, None

        inside_weight, outside_weight = target[1:]
        if not (inside_weight.size == outside_weight.size == gt.size):
            raise ShapeMismatch(
                'the length of bbox target, inside weight and outside '
                'weight must be equal: {}, {}, {}'.format(
                    gt.size, inside_weight.size, outside_weight.size))
        if x.size != gt.size:
            raise ShapeMismatch(
                'the length of input and bbox target must be equal: '
                '{} != {}'.format(x.size, gt.size))
        return (gt.reshape(x.shape),
                inside_weight.reshape(x.shape),
                outside_weight.reshape(x.shape))

    def _compute_diff(self, x, gt, inside_weight):
        xp = cuda.get_array_module(x)
        if not _is_reusable(self.diff, x):
            self.diff = xp.empty_like(x)
        # (x - gt) * w_in
        xp.subtract(x, gt, out=self.diff)
        if inside_weight is not None:
            self.diff *= inside_weight

    def forward(self, x, target):
        """Computes the loss.

        Args:
            x (:ref:`ndarray`): Predicted values. The size of its first
                axis is the batch size.
            target (:ref:`ndarray` or tuple of :ref:`ndarray`):
                The ground truth, or a tuple of the ground truth,
                inside weights and outside weights. Each array should
                have as many elements as :obj:`x`.

        Returns:
            :ref:`ndarray`:
            A zero-dimensional array with the dtype of :obj:`x`.

        """
        gt, inside_weight, outside_weight = self._check_target(x, target)
        self.has_weights = inside_weight is not None
        xp = cuda.get_array_module(x)

        self._compute_diff(x, gt, inside_weight)
        self._diff_ready = True

        if not _is_reusable(self.buffer, x):
            self.buffer = xp.empty_like(x)
        xp.abs(self.diff, out=self.buffer)
        _smooth_l1(self.buffer, self.sigma2)
        if self.has_weights:
            self.buffer *= outside_weight

        loss = self.buffer.sum() / _normalizer(self.num, x.shape[0])
        return xp.asarray(loss, dtype=x.dtype)

    def backward(self, x, target):
        """Computes the gradient of the loss with respect to the input.

        The returned array is owned by the criterion and is overwritten
        by the next call.

        Args:
            x (:ref:`ndarray`): The input given to :meth:`forward`.
            target (:ref:`ndarray` or tuple of :ref:`ndarray`):
                The target given to :meth:`forward`.

        Returns:
            :ref:`ndarray`:
            The gradient. Its shape is the same as :obj:`x`.

        """
        gt, inside_weight, outside_weight = self._check_target(x, target)
        self.has_weights = inside_weight is not None
        xp = cuda.get_array_module(x)

        reuse = chainer.config.loss_reuse_diff
        if not (reuse and self._diff_ready and _is_reusable(self.diff, x)):
            if reuse:
                warnings.warn(
                    'backward is called without a matching forward. '
                    'The residual is recomputed.', RuntimeWarning)
            self._compute_diff(x, gt, inside_weight)
        self._diff_ready = False

        _smooth_l1_grad(self.diff, self.sigma2)
        if not _is_reusable(self.grad_input, x):
            self.grad_input = xp.empty_like(x)
        xp.multiply(
            self.diff, _grad_scale(self.num, x.shape[0]), out=self.grad_input)
        if self.has_weights:
            # scale by inside weight
            self.grad_input *= inside_weight
            # scale by outside weight
            self.grad_input *= outside_weight
        return self.grad_input

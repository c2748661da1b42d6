import numbers

import numpy as np

from chainer.backends import cuda
from chainer import function
from chainer.utils import type_check

from chainerloss.errors import InvalidArgument


def _check_sigma(sigma):
    if isinstance(sigma, bool) or not isinstance(sigma, numbers.Real):
        raise InvalidArgument(
            'sigma must be a positive number: {}, {}'
            .format(type(sigma), sigma))
    if not sigma > 0:
        raise InvalidArgument(
            'sigma must be a positive number: {}'.format(sigma))


def _check_num(num):
    if isinstance(num, bool) or not isinstance(num, numbers.Integral):
        raise InvalidArgument(
            'num must be an integer: {}, {}'.format(type(num), num))


def _normalizer(num, batch_size):
    if num > 0:
        return num
    return batch_size


def _grad_scale(num, batch_size):
    # Without an explicit num, the gradient is scaled up by the batch size
    # while the loss is divided by it.
    if num > 0:
        return 1. / num
    return batch_size


def _smooth_l1(abs_diff, sigma2):
    # f(x) = 0.5 * (sigma * x)^2          if |x| < 1 / sigma / sigma
    #        |x| - 0.5 / sigma / sigma    otherwise
    # abs_diff is overwritten.
    xp = cuda.get_array_module(abs_diff)
    flag = abs_diff < 1. / sigma2
    abs_diff[...] = xp.where(
        flag, 0.5 * sigma2 * xp.square(abs_diff), abs_diff - 0.5 / sigma2)
    return abs_diff


def _smooth_l1_grad(diff, sigma2):
    # f'(x) = sigma * sigma * x    if |x| < 1 / sigma / sigma
    #         sign(x)              otherwise
    # diff is overwritten.
    xp = cuda.get_array_module(diff)
    flag = xp.abs(diff) < 1. / sigma2
    diff[...] = xp.where(flag, sigma2 * diff, xp.sign(diff))
    return diff


class SmoothL1LossWithWeights(function.Function):

    def __init__(self, sigma=1., num=0):
        _check_sigma(sigma)
        _check_num(num)
        self.sigma2 = sigma * sigma
        self.num = num

    def check_type_forward(self, in_types):
        n_in = type_check.eval(in_types.size())
        if n_in != 2 and n_in != 4:
            raise type_check.InvalidType(
                '%s or %s' % (in_types.size() == 2, in_types.size() == 4),
                '%s == %s' % (in_types.size(), n_in))

        x_type = in_types[0]
        type_check.expect(
            x_type.dtype.kind == 'f',
            x_type.ndim >= 1,
        )
        x_size = np.prod(type_check.eval(x_type.shape))
        for i in range(1, n_in):
            type_check.expect(in_types[i].dtype == x_type.dtype)
            size = np.prod(type_check.eval(in_types[i].shape))
            if size != x_size:
                raise type_check.InvalidType(
                    'in_types[{}].size == x.size'.format(i),
                    '{} != {}'.format(size, x_size))

    def forward(self, inputs):
        xp = cuda.get_array_module(*inputs)
        x, t = inputs[:2]
        self.diff = x - t.reshape(x.shape)
        if len(inputs) == 4:
            self.diff *= inputs[2].reshape(x.shape)

        y = _smooth_l1(xp.abs(self.diff), self.sigma2)
        if len(inputs) == 4:
            y *= inputs[3].reshape(x.shape)
        loss = y.sum() / _normalizer(self.num, x.shape[0])
        return xp.asarray(loss, dtype=x.dtype),

    def backward(self, inputs, grad_outputs):
        x, t = inputs[:2]
        gy, = grad_outputs

        gx = _smooth_l1_grad(self.diff.copy(), self.sigma2)
        gx *= gy * _grad_scale(self.num, x.shape[0])
        if len(inputs) == 4:
            gx *= inputs[2].reshape(x.shape)
            gx *= inputs[3].reshape(x.shape)
            return gx, -gx.reshape(t.shape), None, None
        return gx, -gx.reshape(t.shape)


def smooth_l1_loss_with_weights(
        x, t, inside_weight=None, outside_weight=None, sigma=1., num=0):
    """Smooth L1 loss with inside and outside weights.

    This is the localization loss of Fast R-CNN [#]_. With the residual
    :math:`d_i = w^{in}_i (x_i - t_i)`, the loss is

    .. math::

        L = \\frac{1}{n} \\sum_i w^{out}_i f(d_i), \\quad
        f(d) = \\begin{cases}
            0.5 \\sigma^2 d^2 & (|d| < 1 / \\sigma^2) \\\\
            |d| - 0.5 / \\sigma^2 & (\\text{otherwise})
        \\end{cases}

    where :math:`n` is :obj:`num` when it is positive and the size of
    the first axis of :obj:`x` otherwise.

    When :obj:`num` is not positive, the gradient is scaled by the size
    of the first axis instead of being divided by it. The same convention
    is used by
    :class:`~chainerloss.criterions.SmoothL1CriterionWithWeights`.

    .. [#] Ross Girshick. Fast R-CNN. ICCV 2015.

    Args:
        x (~chainer.Variable or :ref:`ndarray`): Predicted values.
            Its dtype should be :obj:`numpy.float32` or
            :obj:`numpy.float64`.
        t (~chainer.Variable or :ref:`ndarray`): Ground truth values.
            It should have the same dtype and number of elements as
            :obj:`x`.
        inside_weight (:ref:`ndarray`): Weights multiplied to the
            residual before the piecewise function is applied.
        outside_weight (:ref:`ndarray`): Weights multiplied to the
            output of the piecewise function. :obj:`inside_weight` and
            :obj:`outside_weight` should be given together.
        sigma (float): Controls the width of the quadratic region.
        num (int): Normalizer. If this is not positive, the size of the
            first axis of :obj:`x` is used.

    Returns:
        ~chainer.Variable:
        A variable holding a scalar.

    """
    if (inside_weight is None) != (outside_weight is None):
        raise InvalidArgument(
            'inside_weight and outside_weight must be given together')

    func = SmoothL1LossWithWeights(sigma=sigma, num=num)
    if inside_weight is None:
        return func(x, t)
    return func(x, t, inside_weight, outside_weight)

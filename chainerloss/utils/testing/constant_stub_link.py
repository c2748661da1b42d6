import numpy as np

import chainer


class ConstantStubLink(chainer.Link):
    """A chainer.Link that returns constant value(s).

    The values are kept as persistent arrays, so that they follow the
    link when it is sent to another device.

    Args:
        outputs (~numpy.ndarray or tuple of ~numpy.ndarray):
            The value(s) of variable(s) returned by :meth:`forward`.
            If an array is specified, :meth:`forward` returns
            a :obj:`chainer.Variable`. Otherwise, it returns a tuple of
            :obj:`chainer.Variable`.
    """

    def __init__(self, outputs):
        super(ConstantStubLink, self).__init__()

        self._tuple = isinstance(outputs, tuple)
        if not self._tuple:
            outputs = outputs,

        self._output_names = []
        for i, output in enumerate(outputs):
            if not isinstance(output, np.ndarray):
                raise ValueError(
                    'output must be numpy.ndarray or tuple of numpy.ndarray')
            name = 'output{}'.format(i)
            self.add_persistent(name, output)
            self._output_names.append(name)

    def forward(self, *_):
        """Returns value(s) independent of the arguments."""
        outputs = tuple(
            chainer.Variable(getattr(self, name))
            for name in self._output_names)
        if self._tuple:
            return outputs
        return outputs[0]

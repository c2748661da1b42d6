from importlib import metadata

from chainerloss import criterions  # NOQA
from chainerloss import errors  # NOQA
from chainerloss import functions  # NOQA
from chainerloss import links  # NOQA
from chainerloss import utils  # NOQA


__version__ = metadata.version('chainerloss')


from chainer.configuration import global_config  # NOQA


global_config.loss_reuse_diff = True

from chainerloss.utils.testing.constant_stub_link import ConstantStubLink  # NOQA

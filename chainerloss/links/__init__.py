from chainerloss.links.bbox_regression_train_chain import BBoxRegressionTrainChain  # NOQA

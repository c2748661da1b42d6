from chainerloss.criterions.smooth_l1_criterion_with_weights import SmoothL1CriterionWithWeights  # NOQA

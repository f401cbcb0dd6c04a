"""Neural network definitions used for sustainability scoring."""

from typing import List, Sequence

from torch import nn


class BoundedMultiLayerPerceptron(nn.Module):
    """Small MLP with sigmoid scaling to bound output in [0, 1].

    Each hidden layer is followed by ReLU and its own dropout rate.
    """

    def __init__(
        self,
        input_dimension: int,
        hidden_layer_sizes: Sequence[int],
        dropout_rates: Sequence[float],
    ) -> None:
        super().__init__()
        if len(dropout_rates) != len(hidden_layer_sizes):
            raise ValueError("Expected one dropout rate per hidden layer.")
        layers: List[nn.Module] = []
        previous_size = input_dimension
        for hidden_size, dropout_rate in zip(hidden_layer_sizes, dropout_rates):
            layers.extend(
                [
                    nn.Linear(previous_size, hidden_size),
                    nn.ReLU(),
                    nn.Dropout(dropout_rate),
                ]
            )
            previous_size = hidden_size
        layers.append(nn.Linear(previous_size, 1))
        self.network_body = nn.Sequential(*layers)
        self.sigmoid = nn.Sigmoid()

    def forward(self, inputs):  # type: ignore[override]
        return self.sigmoid(self.network_body(inputs))

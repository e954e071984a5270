"""NumPy CPU kernels for convolution and pooling."""

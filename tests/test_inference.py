import warnings

import numpy as np
import numpy.linalg
import pytest
import gphessian
from gphessian import Hyperparameters, exact_inference

class ExpScaleMeanFunction(gphessian.MeanFunction):
    """mu = exp(a) * x_0 + b**2, which is nonlinear in its hyperparameters.
    """
    def __init__(self):
        super(ExpScaleMeanFunction, self).__init__(num_dim=2, num_params=2)
    
    def _evaluate(self, hyp, x):
        return np.exp(hyp[0]) * x[:, 0] + hyp[1]**2
    
    def _gradient(self, hyp, x, i):
        if i == 0:
            return np.exp(hyp[0]) * x[:, 0]
        return 2 * hyp[1] * np.ones(x.shape[0])
    
    def _hessian(self, hyp, x, i, j):
        if i == j == 0:
            return np.exp(hyp[0]) * x[:, 0]
        elif i == j == 1:
            return 2 * np.ones(x.shape[0])
        return np.zeros(x.shape[0])

class NoHessianMeanFunction(gphessian.ConstantMeanFunction):
    supports_hessian = False

class NegativeKernel(gphessian.Kernel):
    def __init__(self):
        super(NegativeKernel, self).__init__(num_dim=1, num_params=1)
    
    def evaluate(self, hyperparameters, x, z=None):
        hyperparameters, x, z = self._check_inputs(hyperparameters, x, z)
        return -np.eye(x.shape[0])

def _data_2d():
    x = np.random.RandomState(0).randn(8, 2)
    y = np.sin(x[:, 0]) + 0.5 * x[:, 1] + 0.1 * np.random.RandomState(1).randn(8)
    return x, y

def _data_1d():
    x = np.linspace(-4, 4, 5)[:, None]
    y = np.array([-0.7, 0.9, 0.1, -1.1, 0.6])
    return x, y

def _cases():
    x, y = _data_2d()
    return [
        (
            Hyperparameters(cov=[np.log(1.2), np.log(0.9), np.log(1.1)],
                            lik=np.log(0.3), mean=[0.2, -0.1, 0.05]),
            gphessian.LinearMeanFunction(num_dim=2),
            x,
            y
        ),
        (
            Hyperparameters(cov=[np.log(0.8), np.log(1.5), np.log(0.9)],
                            lik=np.log(0.2), mean=[-0.3, 0.4]),
            ExpScaleMeanFunction(),
            x,
            y
        ),
        (
            Hyperparameters(cov=[np.log(1.2), np.log(0.9), np.log(1.1)],
                            lik=np.log(0.5), mean=[0.1]),
            gphessian.ConstantMeanFunction(num_dim=2),
            x,
            y
        ),
    ]

def _nlZ_fun(mean, k, x, y, hyp):
    def fun(vec):
        h = Hyperparameters.from_vector(vec, hyp.num_cov, hyp.num_mean)
        return exact_inference(h, mean, k, 'gaussian', x, y, nargout=2)[1]
    return fun

def _grad_fun(mean, k, x, y, hyp):
    def fun(vec):
        h = Hyperparameters.from_vector(vec, hyp.num_cov, hyp.num_mean)
        return exact_inference(h, mean, k, 'gaussian', x, y, nargout=3)[2].to_vector()
    return fun

def test_gradient_matches_finite_difference():
    for hyp, mean, x, y in _cases():
        k = gphessian.ARDSquaredExponentialKernel(num_dim=2)
        post, nlZ, dnlZ, HnlZ = exact_inference(hyp, mean, k, 'gaussian', x, y)
        fd = gphessian.finite_difference_gradient(
            _nlZ_fun(mean, k, x, y, hyp), hyp.to_vector(), step=1e-5
        )
        np.testing.assert_allclose(dnlZ.to_vector(), fd, rtol=1e-4, atol=1e-6)

def test_hessian_matches_finite_difference():
    for hyp, mean, x, y in _cases():
        k = gphessian.ARDSquaredExponentialKernel(num_dim=2)
        post, nlZ, dnlZ, HnlZ = exact_inference(hyp, mean, k, 'gaussian', x, y)
        fd = gphessian.finite_difference_hessian(
            _grad_fun(mean, k, x, y, hyp), hyp.to_vector(), step=1e-5
        )
        np.testing.assert_allclose(HnlZ.H, fd, rtol=1e-4, atol=1e-5)

def test_hessian_symmetric_and_indexed():
    hyp, mean, x, y = _cases()[0]
    k = gphessian.ARDSquaredExponentialKernel(num_dim=2)
    post, nlZ, dnlZ, HnlZ = exact_inference(hyp, mean, k, 'gaussian', x, y)
    assert HnlZ.H.shape == (7, 7)
    np.testing.assert_array_equal(HnlZ.H, HnlZ.H.T)
    np.testing.assert_array_equal(HnlZ.covariance_ind, [0, 1, 2])
    assert HnlZ.likelihood_ind == 3
    np.testing.assert_array_equal(HnlZ.mean_ind, [4, 5, 6])

def test_output_levels_agree():
    for hyp, mean, x, y in _cases():
        k = gphessian.ARDSquaredExponentialKernel(num_dim=2)
        post4, nlZ4, dnlZ4, HnlZ4 = exact_inference(hyp, mean, k, 'gaussian', x, y)
        post1 = exact_inference(hyp, mean, k, 'gaussian', x, y, nargout=1)
        post2, nlZ2 = exact_inference(hyp, mean, k, 'gaussian', x, y, nargout=2)
        post3, nlZ3, dnlZ3 = exact_inference(hyp, mean, k, 'gaussian', x, y, nargout=3)
        assert isinstance(post1, gphessian.Posterior)
        np.testing.assert_allclose(post1.alpha, post4.alpha)
        np.testing.assert_allclose(post1.L, post4.L)
        np.testing.assert_allclose(nlZ2, nlZ4)
        np.testing.assert_allclose(nlZ3, nlZ4)
        np.testing.assert_allclose(dnlZ3.to_vector(), dnlZ4.to_vector(), rtol=1e-10, atol=1e-12)

def test_posterior_alpha():
    hyp, mean, x, y = _cases()[0]
    k = gphessian.ARDSquaredExponentialKernel(num_dim=2)
    post = exact_inference(hyp, mean, k, None, x, y, nargout=1)
    V = k.evaluate(hyp.cov, x) + hyp.noise_variance * np.eye(len(y))
    np.testing.assert_allclose(V.dot(post.alpha), y - mean.evaluate(hyp.mean, x))
    np.testing.assert_allclose(post.sW, np.ones(len(y)) / np.sqrt(hyp.noise_variance))
    assert post.high_noise

def test_posterior_round_trip():
    for lik in (np.log(0.3), np.log(1e-4)):
        hyp, mean, x, y = _cases()[0]
        hyp.lik = lik
        k = gphessian.ARDSquaredExponentialKernel(num_dim=2)
        post, nlZ, dnlZ, HnlZ = exact_inference(hyp, mean, k, 'gaussian', x, y)
        assert post.high_noise == (hyp.noise_variance >= gphessian.NOISE_THRESHOLD)
        post_rt, nlZ_rt, dnlZ_rt, HnlZ_rt = exact_inference(
            hyp, mean, k, 'gaussian', x, post
        )
        assert post_rt is post
        np.testing.assert_allclose(nlZ_rt, nlZ, rtol=1e-6)
        np.testing.assert_allclose(dnlZ_rt.to_vector(), dnlZ.to_vector(), rtol=1e-6, atol=1e-8)
        np.testing.assert_allclose(HnlZ_rt.H, HnlZ.H, rtol=1e-6, atol=1e-8)

def test_posterior_round_trip_without_discriminant():
    for lik in (np.log(0.3), np.log(1e-4)):
        hyp, mean, x, y = _cases()[0]
        hyp.lik = lik
        k = gphessian.ARDSquaredExponentialKernel(num_dim=2)
        post, nlZ, dnlZ, HnlZ = exact_inference(hyp, mean, k, 'gaussian', x, y)
        bare = gphessian.Posterior(post.alpha, post.L, post.sW)
        with pytest.warns(RuntimeWarning):
            post_rt, nlZ_rt, dnlZ_rt, HnlZ_rt = exact_inference(
                hyp, mean, k, 'gaussian', x, bare
            )
        np.testing.assert_allclose(nlZ_rt, nlZ, rtol=1e-6)
        np.testing.assert_allclose(HnlZ_rt.H, HnlZ.H, rtol=1e-6, atol=1e-8)

def test_end_to_end_1d():
    x, y = _data_1d()
    hyp = Hyperparameters(cov=[np.log(1.0), np.log(1.0)], lik=np.log(0.1))
    k = gphessian.ARDSquaredExponentialKernel(num_dim=1)
    post, nlZ, dnlZ, HnlZ = exact_inference(hyp, None, k, 'gaussian', x, y)
    
    assert np.isfinite(nlZ)
    assert nlZ > 0
    assert HnlZ.H.shape == (3, 3)
    np.testing.assert_array_equal(HnlZ.H, HnlZ.H.T)
    assert list(HnlZ.covariance_ind) == [0, 1]
    assert HnlZ.likelihood_ind == 2
    assert len(HnlZ.mean_ind) == 0
    assert dnlZ.mean.shape == (0,)
    
    h = 1e-5
    hyp_p = hyp.copy()
    hyp_p.cov[0] += h
    hyp_m = hyp.copy()
    hyp_m.cov[0] -= h
    fd = (
        exact_inference(hyp_p, None, k, 'gaussian', x, y, nargout=2)[1] -
        exact_inference(hyp_m, None, k, 'gaussian', x, y, nargout=2)[1]
    ) / (2 * h)
    np.testing.assert_allclose(dnlZ.cov[0], fd, rtol=1e-4)

def test_noise_parameterizations_agree():
    x, y = _data_1d()
    k = gphessian.ARDSquaredExponentialKernel(num_dim=1)
    hyp = Hyperparameters(cov=[np.log(1.0), np.log(1.0)], lik=np.log(0.01))
    post_hi, nlZ_hi, dnlZ_hi, HnlZ_hi = exact_inference(
        hyp, None, k, 'gaussian', x, y, noise_threshold=0.0
    )
    post_lo, nlZ_lo, dnlZ_lo, HnlZ_lo = exact_inference(
        hyp, None, k, 'gaussian', x, y, noise_threshold=1.0
    )
    assert post_hi.high_noise and not post_lo.high_noise
    np.testing.assert_allclose(nlZ_hi, nlZ_lo, rtol=1e-8)
    np.testing.assert_allclose(dnlZ_hi.to_vector(), dnlZ_lo.to_vector(), rtol=1e-6, atol=1e-8)
    np.testing.assert_allclose(HnlZ_hi.H, HnlZ_lo.H, rtol=1e-6, atol=1e-8)

def test_continuous_across_noise_threshold():
    x, y = _data_1d()
    k = gphessian.ARDSquaredExponentialKernel(num_dim=1)
    eps = 1e-9
    above = Hyperparameters(cov=[0.0, 0.0], lik=0.5 * np.log(1e-6 * (1 + eps)))
    below = Hyperparameters(cov=[0.0, 0.0], lik=0.5 * np.log(1e-6 * (1 - eps)))
    post_a, nlZ_a, dnlZ_a, HnlZ_a = exact_inference(above, None, k, 'gaussian', x, y)
    post_b, nlZ_b, dnlZ_b, HnlZ_b = exact_inference(below, None, k, 'gaussian', x, y)
    assert post_a.high_noise and not post_b.high_noise
    np.testing.assert_allclose(nlZ_a, nlZ_b, rtol=1e-6)
    np.testing.assert_allclose(dnlZ_a.to_vector(), dnlZ_b.to_vector(), rtol=1e-5, atol=1e-8)
    np.testing.assert_allclose(HnlZ_a.H, HnlZ_b.H, rtol=1e-5, atol=1e-8)

def test_ignored_likelihood_warns():
    hyp, mean, x, y = _cases()[0]
    k = gphessian.ARDSquaredExponentialKernel(num_dim=2)
    with pytest.warns(UserWarning):
        post, nlZ = exact_inference(hyp, mean, k, 'likLogistic', x, y, nargout=2)
    with warnings.catch_warnings():
        warnings.simplefilter('error')
        post, nlZ_gauss = exact_inference(hyp, mean, k, 'likGauss', x, y, nargout=2)
    np.testing.assert_allclose(nlZ, nlZ_gauss)

def test_missing_hessian_capability():
    x, y = _data_2d()
    hyp = Hyperparameters(cov=[0.0, 0.0, 0.0], lik=np.log(0.3), mean=[0.1])
    mean = NoHessianMeanFunction(num_dim=2)
    k = gphessian.ARDSquaredExponentialKernel(num_dim=2)
    post, nlZ, dnlZ = exact_inference(hyp, mean, k, 'gaussian', x, y, nargout=3)
    with pytest.raises(gphessian.GPArgumentError):
        exact_inference(hyp, mean, k, 'gaussian', x, y, nargout=4)

def test_dimension_errors():
    hyp, mean, x, y = _cases()[0]
    k = gphessian.ARDSquaredExponentialKernel(num_dim=2)
    with pytest.raises(gphessian.GPDimensionError):
        exact_inference(hyp, mean, k, 'gaussian', x, y[:-1])
    with pytest.raises(gphessian.GPDimensionError):
        exact_inference(hyp, mean, gphessian.ARDSquaredExponentialKernel(num_dim=3),
                        'gaussian', x, y)
    with pytest.raises(gphessian.GPDimensionError):
        exact_inference(Hyperparameters(cov=[0.0, 0.0], lik=0.0, mean=hyp.mean),
                        mean, k, 'gaussian', x, y)
    with pytest.raises(gphessian.GPDimensionError):
        exact_inference(Hyperparameters(cov=hyp.cov, lik=0.0, mean=[0.0]),
                        mean, k, 'gaussian', x, y, nargout=2)
    with pytest.raises(gphessian.GPArgumentError):
        exact_inference(hyp, mean, k, 'gaussian', x, y, nargout=5)

def test_not_positive_definite_is_fatal():
    x = np.linspace(0, 1, 4)
    y = np.zeros(4)
    k = NegativeKernel()
    for lik in (np.log(0.1), np.log(1e-5)):
        hyp = Hyperparameters(cov=[0.0], lik=lik)
        with pytest.raises(numpy.linalg.LinAlgError):
            exact_inference(hyp, None, k, 'gaussian', x, y, nargout=2)

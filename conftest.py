import pytest


def pytest_addoption(parser):
    parser.addoption("--show_plot", action="store", default="False",
        help="show the plots of the calculus tests interactively: True or False")


@pytest.fixture
def show_plot(request):
    """This callable fixture allows us to either show plots when running test for visual inspection,
    or close them and at least test the absence of exceptions when running test automated"""
    try:
        flag = request.config.getoption("--show_plot")
    except ValueError:
        import os
        flag = os.environ.get('SHOW_PLOT', 'False')
    import matplotlib
    import matplotlib.pyplot as plt
    if flag == 'True':
        return plt.show
    else:
        matplotlib.use('Agg')
        return lambda: plt.close('all')

import setuptools

setuptools.setup(
    name="dicedist",
    version="0.0.0",
    classifiers=["Programming Language :: Python :: 3"],
    packages=setuptools.find_packages(include=["dicedist", "dicedist.*"]),
    package_data={"dicedist": ["*.lark", "*.yaml"]},
    python_requires=">=3.8",
    entry_points={"console_scripts": ["dicedist=dicedist.__main__:main"]},
    install_requires=["lark", "pyyaml", "pandas"],
    extras_require={"test": ["pytest"]},
)

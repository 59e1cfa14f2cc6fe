import os

from setuptools import find_packages, setup

README = os.path.join(os.path.dirname(__file__), "README.md")


def readme() -> str:
    with open(README, encoding="utf-8") as f:
        return f.read()


setup(
    name="rnc_to_code",
    version="0.1.0",
    description="Compile OOXML RELAX NG Compact schemas into Python types, parsers and serializers",
    long_description=readme(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Code Generators",
        "Topic :: Text Processing :: Markup :: XML",
        "Intended Audience :: Developers",
    ],
    keywords="relax ng rnc ooxml ecma-376 code generation dataclass parser serializer",
    license="MIT",
    packages=find_packages(),
    python_requires=">=3.11",
    install_requires=[
        "click>=8.0.0",
        "jinja2>=3.0.0",
        "PyYAML>=6.0",
        "lxml>=4.9.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "black>=23.0.0",
            "ruff>=0.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "rnc_to_code=rnc_to_code.rnc_to_code:cli",
        ],
    },
    include_package_data=True,
    package_data={
        "rnc_to_code": ["templates/**/*.jinja2"],
    },
    zip_safe=False,
)

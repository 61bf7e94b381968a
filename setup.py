# Copyright (C) 2026 The secureenv Authors
# 
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
# 
#     http://www.apache.org/licenses/LICENSE-2.0
# 
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from setuptools import setup, find_packages

extras_require={
    "lint": ["ruff", "black"],
    "test": ["pytest", "pytest-mock"],
}
extras_require["dev"] = extras_require["lint"] + extras_require["test"]

setup(
    name="secureenv",
    version="0.1.0",
    description="Read environment variables once and remove them so child processes never inherit them.",
    long_description=open("README.md", encoding="utf-8").read(),
    long_description_content_type="text/markdown",
    license="Apache-2.0",
    classifiers=[
        "License :: OSI Approved :: Apache Software License",
        "Topic :: Security",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    keywords=["environment", "secrets", "security"],
    packages=find_packages(".", include=["secureenv", "secureenv.*"]),
    install_requires=[
        "numpy",
    ],
    python_requires=">=3.9",
    extras_require=extras_require,
)

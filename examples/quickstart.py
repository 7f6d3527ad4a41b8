import logging
from time import perf_counter
from sklearn.datasets import load_iris
from sklearn.model_selection import train_test_split
from entropytree import DecisionTree

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

iris = load_iris()
X_train, X_test, y_train, y_test = train_test_split(
    iris.data, iris.target, test_size=0.3, random_state=42, stratify=iris.target
)

clf = DecisionTree(feature_names=list(iris.feature_names))

t0 = perf_counter(); clf.fit(X_train, y_train); print(f"fit: {perf_counter()-t0:.3f} s")
print(f"depth={clf.get_depth()} leaves={clf.get_n_leaves()}")
print(f"test accuracy: {clf.score(X_test, y_test):.3f}")

clf.print_tree(class_names=list(iris.target_names))
for rule in clf.export_rules(class_names=list(iris.target_names)):
    print(rule)
print("first test sample:", clf.predict(X_test[0]), "via", clf.predict_rule(X_test[0])[0])

try:
    clf.export_graphviz("iris_tree", class_names=list(iris.target_names), format="dot")
except RuntimeError as e:
    print(f"Skipping Graphviz export: {e}")

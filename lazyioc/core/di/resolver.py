"""
依赖解析图

在一次解析过程中记录名称之间的依赖边，并在插入边时检测循环依赖
"""

from collections import deque
from typing import Dict, List, Optional, Set

from ...exceptions import CircularReferenceError


class DependencyResolver:
    """依赖解析图"""

    def __init__(self):
        """初始化依赖解析图"""
        self.graph: Dict[str, Set[str]] = {}  # name -> set of dependency names

    def add(self, name: str) -> None:
        """
        添加节点（已存在时忽略）

        Args:
            name: 实体名称
        """
        if name not in self.graph:
            self.graph[name] = set()

    def set_dependency(self, source: str, target: str) -> None:
        """
        记录依赖边 source -> target

        如果 target 已经（直接或间接）依赖 source，则拒绝插入该边

        Args:
            source: 依赖方名称
            target: 被依赖方名称

        Raises:
            CircularReferenceError: 如果插入该边会形成循环
        """
        path = self.find_path(target, source)
        if path is not None:
            raise CircularReferenceError(source, target, [source] + path)

        self.add(source)
        self.add(target)
        self.graph[source].add(target)

    def find_path(self, start: str, goal: str) -> Optional[List[str]]:
        """
        沿已有的依赖边查找从 start 到 goal 的路径（广度优先）

        Args:
            start: 起点
            goal: 终点

        Returns:
            路径上的名称列表（包含两端），不可达时返回 None
        """
        parents: Dict[str, Optional[str]] = {start: None}
        queue = deque([start])

        while queue:
            node = queue.popleft()
            if node == goal:
                path = []
                while node is not None:
                    path.append(node)
                    node = parents[node]
                return list(reversed(path))

            for neighbor in self.graph.get(node, set()):
                if neighbor not in parents:
                    parents[neighbor] = node
                    queue.append(neighbor)

        return None

    def depends_on(self, source: str, target: str) -> bool:
        """检查 source 是否（直接或间接）依赖 target"""
        return source != target and self.find_path(source, target) is not None

    def dependencies(self, name: str) -> Set[str]:
        """获取直接依赖集合"""
        return set(self.graph.get(name, set()))

    def copy(self) -> 'DependencyResolver':
        """复制当前依赖图，用于单次解析"""
        resolver = DependencyResolver()
        resolver.graph = {name: set(deps) for name, deps in self.graph.items()}
        return resolver

    def clear(self) -> None:
        """清空依赖图"""
        self.graph.clear()

    def __contains__(self, name: str) -> bool:
        return name in self.graph

    def __len__(self) -> int:
        return len(self.graph)

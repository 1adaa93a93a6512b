from junit_testkit import Suite, assert_equal

def discover():
    math = Suite("Math")

    @math.test("adds")
    def adds():
        print("value:", 1 + 1)
        assert_equal(1 + 1, 2)

    @math.test("subtracts")
    def subtracts():
        assert_equal(5 - 2, 2, "expected 2 got 3")

    @math.test("divides by zero", skip=True)
    def divides():
        pass

    strings = math.describe("strings")

    @strings.test("joins")
    def joins():
        assert_equal("-".join(["a", "b"]), "a-b")

    return math
